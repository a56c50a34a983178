"""Page objects."""

from pageperf.pages.base import PageObject

__all__ = ["PageObject"]
