"""Manifesto do build: uma linha por documento em Parquet (PyArrow), consultado com DuckDB.

Decisões:
- Manifesto gravado ao lado do site (``_manifest/manifest.parquet``) com ZSTD.
- Estatísticas calculadas por SQL no DuckDB sobre a tabela Arrow registrada,
  o que funciona igual para o backend local e o em memória.
- Resultados tabulares devolvidos como Polars DataFrame.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import duckdb
import polars as pl
import pyarrow as pa

from blog_builder.models import BuildReport, SiteSnapshot
from blog_builder.storage.base import StorageBackend
from blog_builder.utils import get_logger

logger = get_logger(__name__)


MANIFEST_PATH = "_manifest/manifest.parquet"

MANIFEST_SCHEMA = pa.schema(
    [
        ("slug", pa.string()),
        ("title", pa.string()),
        ("date", pa.timestamp("us", tz="UTC")),
        ("draft", pa.bool_()),
        ("tags", pa.list_(pa.string())),
        ("categories", pa.list_(pa.string())),
        ("series", pa.string()),
        ("series_weight", pa.int64()),
        ("word_count", pa.int64()),
        ("reading_time", pa.int64()),
        ("status", pa.string()),  # published, draft, failed
        ("error", pa.string()),
        ("source_path", pa.string()),
        ("built_at", pa.timestamp("us", tz="UTC")),
    ]
)


class ManifestStorage:
    """Grava e consulta o manifesto de documentos de um build."""

    def __init__(self, backend: StorageBackend, duckdb_path: str | None = None):
        self.backend = backend
        self.duckdb_path = duckdb_path or ":memory:"
        self._duck_conn = duckdb.connect(self.duckdb_path)

    def __repr__(self) -> str:
        return f"<ManifestStorage backend={self.backend!r} duckdb={self.duckdb_path}>"

    def build_rows(
        self, snapshot: SiteSnapshot, report: BuildReport
    ) -> list[dict[str, Any]]:
        built_at = report.end_time or datetime.now(timezone.utc)
        rows: list[dict[str, Any]] = []

        for rendered in sorted(snapshot, key=lambda r: r.slug):
            meta = rendered.metadata
            rows.append(
                {
                    "slug": rendered.slug,
                    "title": meta.title,
                    "date": meta.date,
                    "draft": meta.draft,
                    "tags": list(meta.tags),
                    "categories": list(meta.categories),
                    "series": meta.series,
                    "series_weight": meta.series_weight,
                    "word_count": rendered.word_count,
                    "reading_time": rendered.reading_time,
                    "status": "draft" if meta.draft else "published",
                    "error": None,
                    "source_path": str(rendered.document.source_path),
                    "built_at": built_at,
                }
            )

        for failure in report.failures:
            rows.append(
                {
                    "slug": failure.slug,
                    "title": None,
                    "date": None,
                    "draft": None,
                    "tags": [],
                    "categories": [],
                    "series": None,
                    "series_weight": None,
                    "word_count": None,
                    "reading_time": None,
                    "status": "failed",
                    "error": f"{failure.error_type}: {failure.error}",
                    "source_path": str(failure.source_path) if failure.source_path else None,
                    "built_at": built_at,
                }
            )

        return rows

    def save(self, snapshot: SiteSnapshot, report: BuildReport) -> str:
        """Grava o manifesto e retorna o path."""
        rows = self.build_rows(snapshot, report)
        table = pa.Table.from_pylist(rows, schema=MANIFEST_SCHEMA)
        self.backend.write_parquet(MANIFEST_PATH, table)
        logger.info(f"Manifesto com {len(rows)} documentos gravado em {MANIFEST_PATH}")
        return MANIFEST_PATH

    def _duck_query_to_polars(self, sql: str) -> pl.DataFrame:
        """Executa query DuckDB e converte resultado em Polars DataFrame."""
        table = self._duck_conn.execute(sql).fetch_arrow_table()
        return pl.from_arrow(table)

    def load(self) -> pa.Table:
        table = self.backend.read_parquet(MANIFEST_PATH)
        self._duck_conn.register("manifest", table)
        return table

    def get_stats(self) -> dict[str, Any]:
        """
        Estatísticas do último build.

        Returns:
            Dicionário com contagens por status, total de palavras e as tags
            mais usadas (Polars DataFrame em ``top_tags``)
        """
        if not self.backend.exists(MANIFEST_PATH):
            logger.warning("Manifesto não encontrado; execute um build primeiro")
            return {}

        self.load()
        totals = self._duck_query_to_polars(
            """
            SELECT
                count(*) AS total,
                count(*) FILTER (WHERE status = 'published') AS published,
                count(*) FILTER (WHERE status = 'draft') AS drafts,
                count(*) FILTER (WHERE status = 'failed') AS failed,
                CAST(coalesce(sum(word_count) FILTER (WHERE status = 'published'), 0) AS BIGINT) AS words,
                max(built_at) AS built_at
            FROM manifest
            """
        ).to_dicts()[0]

        top_tags = self._duck_query_to_polars(
            """
            SELECT tag, count(*) AS documents
            FROM (SELECT unnest(tags) AS tag FROM manifest WHERE status = 'published')
            GROUP BY tag
            ORDER BY documents DESC, tag
            LIMIT 10
            """
        )

        totals["top_tags"] = top_tags
        totals["backend"] = repr(self.backend)
        return totals
