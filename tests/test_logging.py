"""Tests for logging setup and per-document log messages."""

import logging

import pytest

from blog_builder.core import SiteBuilder
from blog_builder.utils import get_document_logger, get_logger, setup_logging

pytestmark = pytest.mark.order(5)


@pytest.fixture
def restore_logging():
    """Restaura os loggers alterados por setup_logging."""
    names = ("blog_builder", "markdown_it", "asyncio", None)
    saved = {
        name: (logging.getLogger(name).level, logging.getLogger(name).propagate, list(logging.getLogger(name).handlers))
        for name in names
    }
    yield
    for name, (level, propagate, handlers) in saved.items():
        target = logging.getLogger(name)
        for handler in target.handlers:
            if handler not in handlers:
                handler.close()
        target.setLevel(level)
        target.propagate = propagate
        target.handlers[:] = handlers


def test_setup_logging_with_file(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "build.log"

    setup_logging(level="DEBUG", log_file=log_file)
    get_logger("blog_builder.tests").info("mensagem de teste")

    assert log_file.read_text(encoding="utf-8").count("mensagem de teste") == 1
    assert logging.getLogger("blog_builder").propagate is False
    assert logging.getLogger("markdown_it").level == logging.WARNING


def test_document_logger_prefix(caplog):
    doc_logger = get_document_logger(get_logger("blog_builder.tests"), "posts/hello")

    with caplog.at_level(logging.WARNING, logger="blog_builder"):
        doc_logger.warning("algo errado")

    (record,) = caplog.records
    assert record.getMessage() == "[posts/hello] algo errado"
    assert record.slug == "posts/hello"


@pytest.mark.asyncio
async def test_failures_are_logged_with_slug(build_config, write_doc, mock_storage, caplog):
    write_doc("broken.md", "{{< gist x >}}\n", title="Broken")

    with caplog.at_level(logging.WARNING, logger="blog_builder"):
        await SiteBuilder(config=build_config, storage=mock_storage).run()

    messages = [r.getMessage() for r in caplog.records if getattr(r, "slug", None) == "broken"]
    assert len(messages) == 1
    assert messages[0].startswith("[broken] ⚠️ Documento ignorado:")
