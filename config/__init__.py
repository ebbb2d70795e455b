"""Configuration package for the linesheet generator."""

from .settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
