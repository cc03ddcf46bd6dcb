"""Shared base classes reused by several sites built on the same theme."""

from .galleryadults import GalleryAdults, GenreFilter, FavoriteFilter

__all__ = [
    "GalleryAdults",
    "GenreFilter",
    "FavoriteFilter",
]
