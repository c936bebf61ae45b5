"""Módulo de parsers: front matter e shortcodes."""

from .frontmatter import FrontMatterParser
from .shortcodes import ShortcodeScanner

__all__ = ["FrontMatterParser", "ShortcodeScanner"]
