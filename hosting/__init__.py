"""Image hosting helpers."""

from .imgur import ImgurHost

__all__ = ["ImgurHost"]
