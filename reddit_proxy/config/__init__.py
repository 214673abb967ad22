"""Configuration module for the Reddit proxy service."""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
