"""
Top-level package for the WordPress → Contentful migration utility.

This package bundles all components required to fetch content from the
WordPress REST API, convert post HTML to Contentful Rich Text, upload media
as Contentful assets and create linked author, tag and post entries.
Modules are split into subpackages:

* :mod:`wp_contentful.extractors` – WordPress REST fetching and post mapping
* :mod:`wp_contentful.parsers` – HTML → Markdown → Rich Text converters and
  the inline image embedding transform
* :mod:`wp_contentful.migrators` – Contentful Management API interactions
* :mod:`wp_contentful.models` – typed records passed between stages
* :mod:`wp_contentful.utils` – configuration, logging and per-item reporting

Each layer has no direct knowledge of configuration or execution strategy;
orchestration is handled in :mod:`wp_contentful.migration_tool`.
"""

__version__ = "0.1.0"
