"""Test suite for the SiteBuilder orchestrator."""

import asyncio
from unittest.mock import MagicMock

import pytest

from blog_builder.core import SiteBuilder
from blog_builder.exceptions import (
    BuildCancelledError,
    CrossReferenceError,
    DocumentError,
    DuplicateSlugError,
    MetadataError,
    OutputWriteError,
    SourceReadError,
    UnknownShortcodeError,
)
from blog_builder.rendering import default_registry
from blog_builder.storage import LocalBackend, MockStorage
from blog_builder.storage.manifest import MANIFEST_PATH
from blog_builder.utils import term_key

pytestmark = pytest.mark.order(3)


def test_init_default(build_config, mock_storage):
    """Testa inicialização com configurações padrão."""
    builder = SiteBuilder(config=build_config, storage=mock_storage)

    assert builder.config is build_config
    assert builder.storage is mock_storage
    assert builder.registry is not None
    assert builder.runner.max_workers == 2
    assert builder.writer is not None
    assert builder.manifest is not None


def test_init_local_backend(build_config, output_dir):
    builder = SiteBuilder(config=build_config)

    assert isinstance(builder.storage, LocalBackend)
    assert builder.storage.base_path == output_dir


def test_discover_documents(build_config, write_doc, mock_storage):
    """Lista .md e .markdown em ordem, ignorando arquivos com prefixo _."""
    write_doc("zeta.md", "z")
    write_doc("posts/b.markdown", "b")
    write_doc("posts/a.md", "a")
    write_doc("posts/_index.md", "lista")
    write_doc("notes.txt", "ignorado")

    builder = SiteBuilder(config=build_config, storage=mock_storage)
    paths = builder.discover_documents()

    names = [p.relative_to(build_config.content_dir).as_posix() for p in paths]
    assert names == ["posts/a.md", "posts/b.markdown", "zeta.md"]


@pytest.mark.parametrize(
    "relative, slug",
    [
        ("alpha.md", "alpha"),
        ("posts/Hello World.md", "posts/hello-world"),
        ("posts/series/index.md", "posts/series"),
        ("index.md", "index"),
    ],
)
def test_slug_for(build_config, mock_storage, relative, slug):
    builder = SiteBuilder(config=build_config, storage=mock_storage)
    assert builder.slug_for(build_config.content_dir / relative) == slug


def test_load_document(build_config, write_doc, mock_storage):
    path = write_doc("my-first-post.md", "\n{{< toc >}}\n", date="2024-01-01")
    builder = SiteBuilder(config=build_config, storage=mock_storage)

    document = builder.load_document(path)

    assert document.slug == "my-first-post"
    assert document.title == "My First Post"
    assert document.body == "\n{{< toc >}}\n"
    assert document.line_offset == 3


def test_load_document_invalid_encoding(build_config, content_dir, mock_storage):
    path = content_dir / "latin1.md"
    path.write_bytes("título: ação".encode("latin-1"))
    builder = SiteBuilder(config=build_config, storage=mock_storage)

    with pytest.raises(SourceReadError):
        builder.load_document(path)


@pytest.mark.asyncio
async def test_three_document_scenario(build_config, write_doc, mock_storage):
    """
    Um publicado, um rascunho e um com shortcode desconhecido:
    índice com uma entrada, resumo 1 publicado / 1 rascunho / 1 erro.
    """
    write_doc("alpha.md", "Texto alfa.\n", title="Alpha", date="2024-01-01", tags=["rust"])
    write_doc("draft.md", "Rascunho.\n", title="Draft", date="2024-02-01", draft=True, tags=["rust"])
    write_doc("broken.md", "{{< gist user 123 >}}\n", title="Broken", date="2024-03-01")

    builder = SiteBuilder(config=build_config, storage=mock_storage)
    report = await builder.run()

    assert report.total_published == 1
    assert report.total_drafts == 1
    assert report.total_skipped == 1
    assert report.published == ["alpha"]
    assert report.drafts == ["draft"]

    (failure,) = report.failures
    assert failure.slug == "broken"
    assert isinstance(failure.error, UnknownShortcodeError)
    assert failure.error.name == "gist"
    assert "broken.md" in str(failure.error)

    index = mock_storage.read_text("index.html")
    assert "/alpha/" in index
    assert "/draft/" not in index
    assert "/broken/" not in index
    assert "draft/index.html" in mock_storage.files
    assert "broken/index.html" not in mock_storage.files
    assert "/draft/" not in mock_storage.read_text("tags/rust/index.html")


@pytest.mark.asyncio
async def test_equal_dates_alpha_before_beta(build_config, write_doc, mock_storage):
    write_doc("beta.md", "b\n", date="2024-01-01T00:00:00Z")
    write_doc("alpha.md", "a\n", date="2024-01-01T00:00:00Z")

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert report.published == ["alpha", "beta"]


@pytest.mark.asyncio
async def test_metadata_error_is_isolated(build_config, write_doc, mock_storage):
    write_doc("good.md", "ok\n", title="Good")
    write_doc("bad.md", raw="---\ntitle: Bad\ndate: amanhã\n---\ncorpo\n")

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert report.published == ["good"]
    (failure,) = report.failures
    assert isinstance(failure.error, MetadataError)
    assert failure.error.line == 3


@pytest.mark.asyncio
async def test_cross_references(build_config, write_doc, mock_storage):
    """Referências são resolvidas contra todos os documentos parseados."""
    write_doc("posts/intro.md", "Veja [a parte 2]({{< ref \"part-two\" >}}).\n", title="Intro")
    write_doc("posts/part-two.md", "Conteúdo.\n", title="Part Two")
    write_doc("posts/dangling.md", "[x]({{< relref \"missing\" >}})\n", title="Dangling")

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert sorted(report.published) == ["posts/intro", "posts/part-two"]
    (failure,) = report.failures
    assert isinstance(failure.error, CrossReferenceError)
    assert failure.error.name == "missing"
    page = mock_storage.read_text("posts/intro/index.html")
    assert 'href="https://blog.example.com/posts/part-two/"' in page


@pytest.mark.asyncio
async def test_duplicate_slug(build_config, write_doc, mock_storage):
    write_doc("Hello.md", "um\n", title="Um")
    write_doc("hello.markdown", "dois\n", title="Dois")

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert report.published == ["hello"]
    (failure,) = report.failures
    assert isinstance(failure.error, DuplicateSlugError)
    assert failure.source_path.name == "hello.markdown"


@pytest.mark.asyncio
async def test_unexpected_handler_error_is_wrapped(build_config, write_doc, mock_storage):
    """Exceções inesperadas de um handler viram DocumentError e o build continua."""
    registry = default_registry()

    def explode(invocation, context):
        raise RuntimeError("bug no handler")

    registry.add("explode", explode)
    write_doc("boom.md", "{{< explode >}}\n", title="Boom")
    write_doc("fine.md", "ok\n", title="Fine")

    builder = SiteBuilder(config=build_config, storage=mock_storage, registry=registry)
    report = await builder.run()

    assert report.published == ["fine"]
    (failure,) = report.failures
    assert type(failure.error) is DocumentError
    assert "bug no handler" in failure.error.message


@pytest.mark.asyncio
async def test_cancelled_build(build_config, write_doc, mock_storage):
    """Com o evento de parada sinalizado, nenhum documento é iniciado."""
    write_doc("a.md", "a\n")
    write_doc("b.md", "b\n")
    stop_event = asyncio.Event()
    stop_event.set()

    builder = SiteBuilder(config=build_config, storage=mock_storage, stop_event=stop_event)
    report = await builder.run()

    assert report.total_published == 0
    assert report.failed_slugs == ["a", "b"]
    assert all(isinstance(f.error, BuildCancelledError) for f in report.failures)


@pytest.mark.asyncio
async def test_request_stop(build_config, mock_storage):
    builder = SiteBuilder(config=build_config, storage=mock_storage)
    builder.request_stop()
    assert builder.runner.stopped is True


@pytest.mark.asyncio
async def test_output_write_error_aborts(build_config, write_doc):
    write_doc("alpha.md", "a\n", title="Alpha")
    storage = MagicMock(spec=MockStorage())
    storage.write_text.side_effect = OutputWriteError("alpha/index.html", "disco cheio")

    builder = SiteBuilder(config=build_config, storage=storage)

    with pytest.raises(OutputWriteError):
        await builder.run()


@pytest.mark.asyncio
async def test_build_to_disk(build_config, write_doc, output_dir):
    """Build completo em disco, com manifesto."""
    write_doc("alpha.md", "Olá.\n", title="Alpha", date="2024-01-01", series="Guide", series_weight=1)
    write_doc("beta.md", "Mundo.\n", title="Beta", date="2024-01-02", series="Guide", series_weight=2)

    report = await SiteBuilder(config=build_config).run()

    assert (output_dir / "alpha" / "index.html").is_file()
    assert (output_dir / "series" / "guide" / "index.html").is_file()
    assert (output_dir / "index.xml").is_file()
    assert (output_dir / MANIFEST_PATH).is_file()
    assert MANIFEST_PATH in report.written
    assert report.execution_time >= 0


@pytest.mark.asyncio
async def test_unterminated_front_matter_scenario(build_config, write_doc, mock_storage):
    """Front matter sem delimitador de fechamento exclui apenas aquele documento."""
    write_doc("alpha.md", "Texto alfa.\n", title="Alpha", date="2024-01-01")
    write_doc("draft.md", "Rascunho.\n", title="Draft", date="2024-02-01", draft=True)
    write_doc("broken.md", raw="---\ntitle: Broken\ndate: 2024-03-01\n\nSem fechamento.\n")

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert (report.total_published, report.total_drafts, report.total_skipped) == (1, 1, 1)
    (failure,) = report.failures
    assert failure.slug == "broken"
    assert isinstance(failure.error, MetadataError)
    assert "/alpha/" in mock_storage.read_text("index.html")
    assert "/broken/" not in mock_storage.read_text("index.html")


@pytest.mark.asyncio
async def test_large_series_weight_in_manifest(build_config, write_doc, mock_storage):
    write_doc("one.md", "um\n", title="One", date="2024-01-01", series="Big", series_weight=1)
    write_doc(
        "two.md", "dois\n", title="Two", date="2024-01-02", series="Big", series_weight=3_000_000_000
    )

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert report.published == ["two", "one"]
    assert report.failures == []
    assert MANIFEST_PATH in report.written
    weights = mock_storage.read_parquet(MANIFEST_PATH).column("series_weight").to_pylist()
    assert sorted(weights) == [1, 3_000_000_000]


@pytest.mark.asyncio
async def test_non_ascii_series_layout(build_config, write_doc, output_dir):
    """Série sem caracteres ASCII não sobrescreve a página de séries."""
    write_doc("a.md", "a\n", title="A", date="2024-01-01", series="日本語", series_weight=1)
    write_doc("b.md", "b\n", title="B", date="2024-01-02", series="日本語", series_weight=2)

    report = await SiteBuilder(config=build_config).run()

    key = term_key("日本語")
    assert f"series/{key}/index.html" in report.written
    assert not any("//" in path for path in report.written)
    assert (output_dir / "series" / key / "index.html").is_file()
    assert f'href="/series/{key}/"' in (output_dir / "series" / "index.html").read_text(
        encoding="utf-8"
    )


@pytest.mark.asyncio
async def test_reference_by_source_path(build_config, write_doc, mock_storage):
    """O caminho real do arquivo resolve mesmo quando o slug normaliza o nome."""
    write_doc("posts/hello_world.md", "Olá.\n", title="Hello")
    write_doc("intro.md", '[x]({{< relref "posts/hello_world.md" >}})\n', title="Intro")

    report = await SiteBuilder(config=build_config, storage=mock_storage).run()

    assert report.failures == []
    assert 'href="/posts/hello-world/"' in mock_storage.read_text("intro/index.html")
