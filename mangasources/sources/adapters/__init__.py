"""Site-specific source implementations.

Each adapter module implements a class that inherits from
ParsedHttpSource directly or from a shared multisrc base.
"""

from .xinmeitulu import XinmeituluAdapter

__all__ = [
    "XinmeituluAdapter",
]
