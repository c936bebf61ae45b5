"""Modelos de dados do pipeline de publicação."""

from .document import (
    Document,
    DocumentFailure,
    DocumentMetadata,
    Heading,
    RenderedDocument,
)
from .shortcode import LiteralSegment, Segment, ShortcodeInvocation, ShortcodeSegment
from .site import AssembledSite, BuildReport, DocumentSummary, Listing, SiteSnapshot

__all__ = [
    "Document",
    "DocumentMetadata",
    "DocumentFailure",
    "Heading",
    "RenderedDocument",
    "ShortcodeInvocation",
    "LiteralSegment",
    "ShortcodeSegment",
    "Segment",
    "DocumentSummary",
    "Listing",
    "SiteSnapshot",
    "AssembledSite",
    "BuildReport",
]
