"""
Extractors for the WordPress REST API.

This subpackage fetches the WordPress collections and maps raw posts into
:class:`~wp_contentful.models.WordPressPost` records, collecting the images
(featured and inline) that must be uploaded to Contentful.
"""
