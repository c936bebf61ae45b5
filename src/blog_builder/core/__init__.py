"""Módulo core do builder."""

from .builder import SiteBuilder
from .concurrent import ConcurrentRunner
from .config import BuildConfig, SiteConfig

__all__ = ["BuildConfig", "SiteConfig", "ConcurrentRunner", "SiteBuilder"]
