"""
Contentful API migrators and helpers.

This subpackage provides functions to interact with the Contentful
Management and Upload REST APIs: creating and publishing entries, uploading
and processing assets, and listing published assets.  It also exposes the
rate limiter used to space calls between items.
"""
