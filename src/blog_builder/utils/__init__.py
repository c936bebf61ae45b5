"""Módulo de utilitários para datas, texto e logging."""

from .dates import format_date, format_rfc822, parse_date
from .logging import DocumentLogger, get_document_logger, get_logger, setup_logging
from .text import count_words, reading_time, slugify, term_key, truncate_words

__all__ = [
    "parse_date",
    "format_date",
    "format_rfc822",
    "setup_logging",
    "get_logger",
    "get_document_logger",
    "DocumentLogger",
    "slugify",
    "term_key",
    "count_words",
    "reading_time",
    "truncate_words",
]
