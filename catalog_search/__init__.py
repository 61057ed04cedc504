"""Faceted product search for storefront catalog views."""

__version__ = "0.1.0"
