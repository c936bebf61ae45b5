"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from blog_builder.cli import build
from blog_builder.core import BuildConfig
from blog_builder.models import BuildReport
from blog_builder.storage.manifest import MANIFEST_PATH

pytestmark = pytest.mark.order(4)


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    """Mantém a configuração de logging dos testes e silencia o console Rich."""
    monkeypatch.setattr(build, "setup_logging", lambda **kwargs: None)
    monkeypatch.setattr(build.console, "quiet", True)


@pytest.fixture
def site_files(write_doc, content_dir):
    write_doc("hello.md", "Olá, mundo.\n", title="Hello", date="2024-01-01", tags=["intro"])
    write_doc("wip.md", "Em andamento.\n", title="WIP", draft=True)
    (content_dir.parent / "config.toml").write_text(
        'baseurl = "https://cli.example.com/"\ntitle = "CLI Blog"\n', encoding="utf-8"
    )
    return content_dir


class TestParseArguments:
    def test_defaults(self, monkeypatch):
        for name in ("BLOG_CONTENT_DIR", "BLOG_OUTPUT_DIR", "BLOG_MAX_WORKERS"):
            monkeypatch.delenv(name, raising=False)

        args = build.parse_arguments([])

        assert args.content_dir == Path("content")
        assert args.output_dir == Path("public")
        assert args.max_workers == BuildConfig.MAX_WORKERS
        assert args.log_level == "INFO"
        assert args.dry_run is False
        assert args.no_manifest is False

    def test_env_defaults(self, monkeypatch, tmp_path):
        """Variáveis de ambiente substituem os padrões."""
        monkeypatch.setenv("BLOG_CONTENT_DIR", str(tmp_path / "src"))
        monkeypatch.setenv("BLOG_MAX_WORKERS", "3")

        args = build.parse_arguments([])

        assert args.content_dir == tmp_path / "src"
        assert args.max_workers == 3

    def test_explicit(self):
        args = build.parse_arguments(
            ["site/content", "site/public", "--max-workers", "16", "--base-url", "https://x.dev/"]
        )

        assert args.content_dir == Path("site/content")
        assert args.output_dir == Path("site/public")
        assert args.max_workers == 16
        assert args.base_url == "https://x.dev/"


def test_load_site_config_beside_content(site_files, output_dir):
    args = build.parse_arguments([str(site_files), str(output_dir)])
    site = build.load_site_config(args)

    assert site.title == "CLI Blog"
    assert site.base_url == "https://cli.example.com/"


def test_base_url_override(site_files, output_dir):
    args = build.parse_arguments(
        [str(site_files), str(output_dir), "--base-url", "https://override.dev/"]
    )
    assert build.load_site_config(args).base_url == "https://override.dev/"


@pytest.mark.asyncio
async def test_dry_run(site_files, output_dir):
    """Dry-run executa o build em memória sem gravar em disco."""
    report = await build.cli([str(site_files), str(output_dir), "--dry-run"])

    assert isinstance(report, BuildReport)
    assert report.published == ["hello"]
    assert report.drafts == ["wip"]
    assert not (output_dir / "index.html").exists()


@pytest.mark.asyncio
async def test_full_build_and_stats(site_files, output_dir):
    report = await build.cli([str(site_files), str(output_dir), "--max-workers", "2"])

    assert report.total_published == 1
    assert (output_dir / "index.html").is_file()
    assert (output_dir / MANIFEST_PATH).is_file()
    assert "https://cli.example.com/hello/" in (output_dir / "index.xml").read_text(
        encoding="utf-8"
    )

    assert await build.cli([str(site_files), str(output_dir), "--show-stats"]) is None


@pytest.mark.asyncio
async def test_no_manifest(site_files, output_dir):
    await build.cli([str(site_files), str(output_dir), "--no-manifest"])

    assert (output_dir / "index.html").is_file()
    assert not (output_dir / MANIFEST_PATH).exists()


@pytest.mark.asyncio
async def test_missing_content_dir(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        await build.cli([str(tmp_path / "missing"), str(tmp_path / "out")])

    assert exc_info.value.code == 1


@pytest.mark.asyncio
async def test_invalid_config_file(site_files, output_dir):
    (site_files.parent / "config.toml").write_text("paginate = 0\n", encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        await build.cli([str(site_files), str(output_dir)])

    assert exc_info.value.code == 1


@pytest.mark.asyncio
async def test_zero_workers_rejected(site_files, output_dir):
    with pytest.raises(SystemExit) as exc_info:
        await build.cli([str(site_files), str(output_dir), "--max-workers", "0"])

    assert exc_info.value.code == 1
