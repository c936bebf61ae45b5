"""Módulo de renderização: Markdown, shortcodes, referências e feed."""

from .content import ContentRenderer, plain_text
from .feed import render_rss
from .markdown import MarkdownRenderer, render_toc
from .references import ReferenceTable, normalize_reference
from .shortcodes import (
    RenderContext,
    ShortcodeHandler,
    ShortcodeRegistry,
    default_registry,
)

__all__ = [
    "ContentRenderer",
    "plain_text",
    "render_rss",
    "MarkdownRenderer",
    "render_toc",
    "ReferenceTable",
    "normalize_reference",
    "RenderContext",
    "ShortcodeHandler",
    "ShortcodeRegistry",
    "default_registry",
]
