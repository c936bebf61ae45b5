"""Gerador estático de blog: Markdown com front matter e shortcodes → site HTML."""

__version__ = "0.1.0"
