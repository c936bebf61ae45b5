"""Pytest configuration and fixtures for blog builder tests."""

from datetime import datetime, timezone
from html import escape
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from blog_builder.core import BuildConfig, SiteConfig
from blog_builder.models import Document, DocumentMetadata, RenderedDocument
from blog_builder.rendering import ContentRenderer, ReferenceTable, default_registry
from blog_builder.storage import MockStorage


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Diretório de conteúdo temporário."""
    path = tmp_path / "content"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "public"


@pytest.fixture
def write_doc(content_dir: Path) -> Callable[..., Path]:
    """Grava um documento Markdown com front matter YAML no diretório de conteúdo."""

    def _write(name: str, body: str = "", raw: str | None = None, **meta: Any) -> Path:
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if raw is not None:
            text = raw
        elif meta:
            front = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True)
            text = f"---\n{front}---\n{body}"
        else:
            text = body
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mock_storage() -> MockStorage:
    """Storage em memória que não escreve em disco."""
    return MockStorage()


@pytest.fixture
def site_config() -> SiteConfig:
    return SiteConfig(
        base_url="https://blog.example.com/",
        title="Test Blog",
        description="Um blog de testes",
        author="Tester",
        paginate=2,
    )


@pytest.fixture
def build_config(content_dir: Path, output_dir: Path, site_config: SiteConfig) -> BuildConfig:
    """Configuração de build apontando para diretórios temporários."""
    return BuildConfig(
        content_dir=content_dir,
        output_dir=output_dir,
        max_workers=2,
        site=site_config,
    )


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def make_document() -> Callable[..., Document]:
    """Fábrica de documentos parseados."""

    def _make(slug: str, body: str = "", **meta: Any) -> Document:
        meta.setdefault("title", slug.replace("-", " ").title())
        return Document(
            slug=slug,
            source_path=Path(f"content/{slug}.md"),
            metadata=DocumentMetadata(**meta),
            body=body,
        )

    return _make


@pytest.fixture
def make_rendered(make_document) -> Callable[..., RenderedDocument]:
    """Fábrica de documentos renderizados para testes do assembler e da escrita."""

    def _make(slug: str, date: str | None = None, **meta: Any) -> RenderedDocument:
        if date is not None:
            meta["date"] = datetime.fromisoformat(date).replace(tzinfo=timezone.utc)
        document = make_document(slug, **meta)
        return RenderedDocument(
            document=document,
            html=f"<p>{escape(document.title)}</p>\n",
            excerpt=document.title,
            word_count=2,
            reading_time=1,
        )

    return _make


@pytest.fixture
def make_renderer(registry) -> Callable[..., ContentRenderer]:
    """Fábrica de ContentRenderer com tabela de referências dos documentos dados."""

    def _make(documents: list[Document] | None = None, **kwargs: Any) -> ContentRenderer:
        references = ReferenceTable.build(documents or [])
        return ContentRenderer(registry=registry, references=references, **kwargs)

    return _make
