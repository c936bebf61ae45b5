"""Modelos para o site montado e o relatório de build."""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping

from .document import DocumentFailure, RenderedDocument


@dataclass(frozen=True)
class DocumentSummary:
    """Resumo de um documento em uma listagem."""

    slug: str
    title: str
    date: datetime | None
    excerpt: str
    url: str
    tags: tuple[str, ...] = ()
    reading_time: int = 1

    @classmethod
    def from_rendered(cls, rendered: RenderedDocument) -> "DocumentSummary":
        return cls(
            slug=rendered.slug,
            title=rendered.metadata.title,
            date=rendered.metadata.date,
            excerpt=rendered.excerpt,
            url=rendered.document.url,
            tags=tuple(rendered.metadata.tags),
            reading_time=rendered.reading_time,
        )


@dataclass(frozen=True)
class Listing:
    """Listagem ordenada de documentos (índice, tag, categoria ou série)."""

    name: str
    kind: str
    key: str
    entries: tuple[DocumentSummary, ...] = ()

    @property
    def slugs(self) -> list[str]:
        return [entry.slug for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"<Listing kind={self.kind} name='{self.name}' entries={len(self.entries)}>"


class SiteSnapshot:
    """
    Conjunto imutável de documentos renderizados.

    Construído uma única vez após a fase paralela e somente leitura a partir daí.
    """

    __slots__ = ("_documents",)

    def __init__(self, documents: list[RenderedDocument] | None = None):
        by_slug = {rendered.slug: rendered for rendered in documents or []}
        object.__setattr__(self, "_documents", MappingProxyType(by_slug))

    def __setattr__(self, name, value):
        raise AttributeError("SiteSnapshot é imutável")

    @property
    def documents(self) -> Mapping[str, RenderedDocument]:
        return self._documents

    def get(self, slug: str) -> RenderedDocument | None:
        return self._documents.get(slug)

    def __iter__(self):
        return iter(self._documents.values())

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, slug: object) -> bool:
        return slug in self._documents

    def __repr__(self) -> str:
        return f"<SiteSnapshot documents={len(self)}>"


@dataclass
class AssembledSite:
    """Coleções derivadas calculadas pelo SiteAssembler."""

    snapshot: SiteSnapshot
    index: Listing
    tags: dict[str, Listing] = field(default_factory=dict)
    categories: dict[str, Listing] = field(default_factory=dict)
    series: dict[str, Listing] = field(default_factory=dict)
    drafts: list[str] = field(default_factory=list)

    @property
    def published(self) -> list[str]:
        return self.index.slugs

    def __repr__(self) -> str:
        return (
            f"<AssembledSite published={len(self.index)} "
            f"tags={len(self.tags)} series={len(self.series)} drafts={len(self.drafts)}>"
        )


@dataclass
class BuildReport:
    """Resultado final do build, incluindo falhas por documento."""

    published: list[str] = field(default_factory=list)
    drafts: list[str] = field(default_factory=list)
    failures: list[DocumentFailure] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def total_published(self) -> int:
        return len(self.published)

    @property
    def total_drafts(self) -> int:
        return len(self.drafts)

    @property
    def total_skipped(self) -> int:
        return len(self.failures)

    @property
    def failed_slugs(self) -> list[str]:
        return [failure.slug for failure in self.failures]

    @property
    def execution_time(self) -> float:
        if not self.start_time or not self.end_time:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def __repr__(self) -> str:
        return (
            f"<BuildReport published={self.total_published} "
            f"drafts={self.total_drafts} skipped={self.total_skipped}>"
        )
