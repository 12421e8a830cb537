"""Flush-only kernel services."""

from workshop_kernel.services.base import BaseService

__all__ = ["BaseService"]
