"""Modelos para documentos de conteúdo."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from ..exceptions import DocumentError


@dataclass
class DocumentMetadata:
    """Metadados tipados extraídos do front matter."""

    title: str = ""
    date: datetime | None = None
    draft: bool = False
    tags: list[str] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    series: str | None = None
    series_weight: int | None = None
    summary: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<DocumentMetadata title='{self.title}' date={self.date} draft={self.draft}>"


@dataclass
class Document:
    """Documento parseado: metadados + corpo bruto."""

    slug: str
    source_path: Path
    metadata: DocumentMetadata
    body: str
    line_offset: int = 0

    @property
    def title(self) -> str:
        return self.metadata.title

    @property
    def date(self) -> datetime | None:
        return self.metadata.date

    @property
    def draft(self) -> bool:
        return self.metadata.draft

    @property
    def url(self) -> str:
        return f"/{self.slug}/"

    def __repr__(self) -> str:
        return f"<Document slug={self.slug} title='{self.title}'>"


@dataclass(frozen=True)
class Heading:
    """Cabeçalho do documento, usado no sumário."""

    level: int
    text: str
    anchor: str


@dataclass
class RenderedDocument:
    """Documento com HTML final e dados derivados da renderização."""

    document: Document
    html: str
    headings: list[Heading] = field(default_factory=list)
    excerpt: str = ""
    word_count: int = 0
    reading_time: int = 1

    @property
    def slug(self) -> str:
        return self.document.slug

    @property
    def metadata(self) -> DocumentMetadata:
        return self.document.metadata

    @property
    def draft(self) -> bool:
        return self.document.draft

    def __repr__(self) -> str:
        return f"<RenderedDocument slug={self.slug} size={len(self.html)}>"


@dataclass
class DocumentFailure:
    """Documento excluído do build por erro."""

    slug: str
    source_path: Path | None
    error: DocumentError

    @property
    def error_type(self) -> str:
        return type(self.error).__name__

    def __repr__(self) -> str:
        return f"<DocumentFailure slug={self.slug} error={self.error_type}>"
