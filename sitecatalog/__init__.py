"""SiteCatalog - multi-site product category catalog service."""

__version__ = "0.1.0"
