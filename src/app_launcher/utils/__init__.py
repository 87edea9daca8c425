"""Shared utilities for app-launcher."""
