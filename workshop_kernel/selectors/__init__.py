"""Read-only query selectors."""

from workshop_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
