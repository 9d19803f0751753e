"""Logging helpers for batch runs."""

from .logger import RunLogger

__all__ = ["RunLogger"]
