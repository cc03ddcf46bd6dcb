"""Site-specific scraping sources for a manga/gallery reader host."""

__version__ = "0.1.0"
