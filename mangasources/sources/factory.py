"""Factory for creating and managing source instances."""

from typing import Callable, Dict, Union, Type

import structlog

from mangasources.core.exceptions import SourceNotFoundError
from mangasources.sources.base import HttpSource
from mangasources.sources.utils import DomainRateLimiter


logger = structlog.get_logger(__name__)

SourceBuilder = Union[Type[HttpSource], Callable[[], HttpSource]]


class SourceFactory:
    """Factory for creating and configuring source instances.

    Provides dependency injection for the shared rate limiter. Builders
    are either source classes or zero-argument callables, so sources
    built on a shared base (one class, many sites) can be registered
    with their constructor arguments bound.
    """

    def __init__(self):
        # Shared rate limiter for all sources
        self.rate_limiter = DomainRateLimiter()
        self._registry: Dict[str, SourceBuilder] = {}

    def register_source(self, key: str, builder: SourceBuilder) -> None:
        """Register a source builder under a key.

        Args:
            key: Source identifier (e.g., "xinmeitulu")
            builder: HttpSource subclass or callable returning a source
        """
        if isinstance(builder, type) and not issubclass(builder, HttpSource):
            raise ValueError(f"Source class must inherit from HttpSource: {builder}")
        if not callable(builder):
            raise ValueError(f"Source builder must be callable: {builder!r}")

        self._registry[key] = builder
        logger.info("source_registered", key=key)

    def create_source(self, key: str) -> HttpSource:
        """Create and configure a source instance.

        Raises:
            SourceNotFoundError: If nothing is registered under key
        """
        builder = self._registry.get(key)
        if builder is None:
            logger.warning("source_not_found", key=key)
            raise SourceNotFoundError(key)

        source = builder()
        source.attach_rate_limiter(self.rate_limiter)

        logger.info("source_created", key=key, name=source.name, source_id=source.id)
        return source

    def get_registered_sources(self) -> list[str]:
        return list(self._registry.keys())

    def has_source(self, key: str) -> bool:
        return key in self._registry


# Global factory instance
source_factory = SourceFactory()


def get_source_factory() -> SourceFactory:
    """Get the global source factory instance."""
    return source_factory
