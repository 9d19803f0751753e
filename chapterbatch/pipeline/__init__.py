"""Batch pipeline package.

This package contains the per-item processor and the manifest-driven batch
driver that wraps each item in its own error boundary.
"""

from .driver import BatchDriver
from .processor import ItemProcessor

__all__ = ["BatchDriver", "ItemProcessor"]
