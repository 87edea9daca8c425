"""Logging utilities for app-launcher."""

from .iso_formatter import ISO8601Formatter

__all__ = ["ISO8601Formatter"]
