"""Register all bundled sources with the factory.

Import and call register_all_sources() once at startup.
"""

import structlog

from mangasources.sources.factory import get_source_factory
from mangasources.sources.adapters import XinmeituluAdapter

logger = structlog.get_logger(__name__)


def register_all_sources() -> None:
    """Register all available sources with the factory."""
    factory = get_source_factory()

    sources = [
        ("xinmeitulu", XinmeituluAdapter),
    ]

    for key, builder in sources:
        try:
            factory.register_source(key, builder)
        except ValueError as e:
            logger.error(
                "source_registration_failed",
                key=key,
                error=str(e),
                exc_info=True,
            )

    logger.info(
        "all_sources_registered",
        count=len(factory.get_registered_sources()),
        sources=factory.get_registered_sources(),
    )
