"""Montagem das coleções derivadas do site (índice, tags, séries)."""

from datetime import datetime, timezone
from typing import Iterable

from ..models import (
    AssembledSite,
    DocumentSummary,
    Listing,
    RenderedDocument,
    SiteSnapshot,
)
from ..utils import get_logger, term_key

logger = get_logger(__name__)


# Documentos sem data vão para o fim do índice
_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


def chronological_key(rendered: RenderedDocument) -> tuple:
    """Data decrescente; empates pelo slug crescente."""
    date = rendered.metadata.date or _UNDATED
    return (-date.timestamp(), rendered.slug)


def series_key(rendered: RenderedDocument) -> tuple:
    """Peso crescente (sem peso por último); empates por data e depois slug."""
    weight = rendered.metadata.series_weight
    date = rendered.metadata.date or _UNDATED
    return (weight is None, weight or 0, date.timestamp(), rendered.slug)


class SiteAssembler:
    """Agrega documentos renderizados em listagens ordenadas."""

    @staticmethod
    def published(snapshot: SiteSnapshot) -> list[RenderedDocument]:
        """Documentos publicáveis (não rascunhos) em ordem cronológica."""
        return sorted(
            (rendered for rendered in snapshot if not rendered.draft),
            key=chronological_key,
        )

    @staticmethod
    def build_index(documents: Iterable[RenderedDocument]) -> Listing:
        entries = tuple(DocumentSummary.from_rendered(d) for d in documents)
        return Listing(name="index", kind="index", key="", entries=entries)

    @staticmethod
    def build_taxonomy(
        documents: list[RenderedDocument], kind: str
    ) -> dict[str, Listing]:
        """
        Agrupa documentos por termo de taxonomia (tags ou categories).

        Args:
            documents: Documentos publicáveis já em ordem cronológica
            kind: "tags" ou "categories"

        Returns:
            Dicionário slug do termo → Listing (ordem cronológica preservada)
        """
        names: dict[str, str] = {}
        grouped: dict[str, list[RenderedDocument]] = {}

        for rendered in documents:
            terms = getattr(rendered.metadata, kind)
            for term in terms:
                key = term_key(term)
                if not key:
                    logger.warning(f"{rendered.slug}: termo '{term}' ignorado em {kind}")
                    continue
                names.setdefault(key, term)
                grouped.setdefault(key, []).append(rendered)

        return {
            key: Listing(
                name=names[key],
                kind=kind,
                key=key,
                entries=tuple(DocumentSummary.from_rendered(d) for d in grouped[key]),
            )
            for key in sorted(grouped)
        }

    @staticmethod
    def build_series(documents: list[RenderedDocument]) -> dict[str, Listing]:
        """Agrupa documentos por série, ordenados pelo ``series_weight``."""
        grouped: dict[str, list[RenderedDocument]] = {}
        names: dict[str, str] = {}

        for rendered in documents:
            series = rendered.metadata.series
            if not series:
                continue
            key = term_key(series)
            if not key:
                logger.warning(f"{rendered.slug}: série '{series}' ignorada")
                continue
            names.setdefault(key, series)
            grouped.setdefault(key, []).append(rendered)

        listings = {}
        for key in sorted(grouped):
            members = sorted(grouped[key], key=series_key)

            weights = [m.metadata.series_weight for m in members if m.metadata.series_weight is not None]
            if len(weights) != len(set(weights)):
                logger.warning(
                    f"Série '{names[key]}' tem series_weight repetido; "
                    "empate resolvido pela data"
                )

            listings[key] = Listing(
                name=names[key],
                kind="series",
                key=key,
                entries=tuple(DocumentSummary.from_rendered(m) for m in members),
            )

        return listings

    @classmethod
    def assemble(cls, snapshot: SiteSnapshot) -> AssembledSite:
        """
        Constrói todas as coleções derivadas a partir do snapshot imutável.

        Rascunhos ficam fora de todas as coleções, mas continuam no snapshot
        (suas páginas individuais são geradas).

        Args:
            snapshot: Documentos renderizados com sucesso

        Returns:
            AssembledSite com índice, tags, categorias, séries e rascunhos
        """
        published = cls.published(snapshot)
        drafts = sorted(rendered.slug for rendered in snapshot if rendered.draft)

        site = AssembledSite(
            snapshot=snapshot,
            index=cls.build_index(published),
            tags=cls.build_taxonomy(published, "tags"),
            categories=cls.build_taxonomy(published, "categories"),
            series=cls.build_series(published),
            drafts=drafts,
        )

        if drafts:
            logger.info(f"{len(drafts)} rascunhos fora das listagens: {drafts}")
        logger.info(
            f"Montado site com {len(site.index)} documentos publicados, "
            f"{len(site.tags)} tags e {len(site.series)} séries"
        )
        return site
