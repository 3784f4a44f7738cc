"""Catalogue scraper: category hierarchy and product details from retail sites."""

from .version import __version__

__all__ = ["__version__"]
