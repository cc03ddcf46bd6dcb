"""Source system translating gallery sites into host entities.

This package provides:
- Entity, filter and preference types shared with the host application
- Base source classes for building site-specific sources
- Utility modules for rate limiting, retries, user agents and HTML parsing
- Factory for creating and managing source instances
"""

from .models import Chapter, Page, Series, SeriesPage, SeriesStatus, UpdateStrategy
from .filters import Filter, FilterList, Header, Separator, CheckBox, Select, UriPartFilter
from .base import HttpSource, ParsedHttpSource
from .factory import SourceFactory, source_factory, get_source_factory

__all__ = [
    # Base classes
    "HttpSource",
    "ParsedHttpSource",
    # Entities
    "Series",
    "Chapter",
    "Page",
    "SeriesPage",
    "SeriesStatus",
    "UpdateStrategy",
    # Filters
    "Filter",
    "FilterList",
    "Header",
    "Separator",
    "CheckBox",
    "Select",
    "UriPartFilter",
    # Factory
    "SourceFactory",
    "source_factory",
    "get_source_factory",
]
