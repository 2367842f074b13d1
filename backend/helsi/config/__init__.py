"""Configuration module."""

from .settings import Settings, settings, PLACEHOLDER_API_KEY

__all__ = ['Settings', 'settings', 'PLACEHOLDER_API_KEY']
