"""Configurações do build e do site."""

import os
import tomllib
from pathlib import Path
from typing import Any

from ..exceptions import ConfigError
from ..utils import get_logger

logger = get_logger(__name__)


class SiteConfig:
    """Parâmetros do site publicados nas páginas geradas."""

    DEFAULT_BASE_URL = "/"
    DEFAULT_TITLE = "Blog"
    DEFAULT_LANGUAGE = "en"

    # Limites
    DEFAULT_PAGINATE = 20
    DEFAULT_RSS_LIMIT = 20

    def __init__(
        self,
        base_url: str | None = None,
        title: str | None = None,
        description: str = "",
        author: str = "",
        language: str | None = None,
        paginate: int | None = None,
        toc_reading_time_threshold: int | None = None,
        rss_limit: int | None = None,
        menu: list[dict[str, str]] | None = None,
    ):
        """
        Args:
            base_url: URL absoluta do site (usada no feed e em ``ref``)
            title: Título do site
            description: Descrição usada no feed e nas meta tags
            author: Autor exibido no rodapé
            language: Código de idioma das páginas e do feed
            paginate: Entradas por página do índice
            toc_reading_time_threshold: Minutos de leitura acima dos quais o sumário é automático
            rss_limit: Número máximo de itens do feed
            menu: Itens ``{"name", "url"}`` do menu principal
        """
        self.base_url = base_url or self.DEFAULT_BASE_URL
        self.title = title or self.DEFAULT_TITLE
        self.description = description
        self.author = author
        self.language = language or self.DEFAULT_LANGUAGE
        self.paginate = paginate if paginate is not None else self.DEFAULT_PAGINATE
        self.toc_reading_time_threshold = toc_reading_time_threshold
        self.rss_limit = rss_limit if rss_limit is not None else self.DEFAULT_RSS_LIMIT
        self.menu = menu or []

        self._validate_config()

    def __repr__(self) -> str:
        return f"<SiteConfig title='{self.title}' base_url={self.base_url}>"

    def _validate_config(self) -> None:
        """Valida as configurações."""
        if not isinstance(self.paginate, int) or self.paginate <= 0:
            raise ConfigError(f"paginate deve ser um inteiro positivo: {self.paginate}")
        if not isinstance(self.rss_limit, int) or self.rss_limit <= 0:
            raise ConfigError(f"rss_limit deve ser um inteiro positivo: {self.rss_limit}")
        threshold = self.toc_reading_time_threshold
        if threshold is not None and (not isinstance(threshold, int) or threshold < 0):
            raise ConfigError(
                f"toc_reading_time_threshold deve ser um inteiro >= 0: {threshold}"
            )
        for item in self.menu:
            if "name" not in item or "url" not in item:
                raise ConfigError(f"Item de menu sem 'name' ou 'url': {item}")

    def absolute_url(self, path: str) -> str:
        """Concatena ``path`` à URL base."""
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "SiteConfig":
        """
        Cria a configuração a partir de um dicionário no formato do ``config.toml``.

        Chaves de primeiro nível são lidas sem diferenciar maiúsculas.
        """
        top = {key.lower(): value for key, value in data.items()}
        params = {key.lower(): value for key, value in top.get("params", {}).items()}
        services = top.get("services", {})

        rss_limit = params.get("rss_limit", top.get("rsslimit"))
        if rss_limit is None:
            rss_limit = services.get("rss", {}).get("limit")

        menu = [
            {"name": str(item.get("name", "")), "url": str(item.get("url", ""))}
            for item in top.get("menu", {}).get("main", [])
        ]

        return cls(
            base_url=top.get("baseurl"),
            title=top.get("title"),
            description=params.get("description", ""),
            author=params.get("author", ""),
            language=top.get("languagecode"),
            paginate=top.get("paginate"),
            toc_reading_time_threshold=params.get("toc_reading_time_threshold"),
            rss_limit=rss_limit,
            menu=menu,
        )

    @classmethod
    def from_toml(cls, path: Path) -> "SiteConfig":
        """
        Carrega o ``config.toml`` do site.

        Raises:
            ConfigError: Arquivo ilegível, TOML inválido ou valores inválidos
        """
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except OSError as e:
            raise ConfigError(f"Não foi possível ler {path}: {e}") from e
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"TOML inválido em {path}: {e}") from e

        config = cls.from_mapping(data)
        logger.debug(f"Configuração do site carregada de {path}: {config!r}")
        return config


class BuildConfig:
    """Configurações do build."""

    # Diretórios
    DEFAULT_CONTENT_DIR = Path("content")
    DEFAULT_OUTPUT_DIR = Path("public")
    CONFIG_FILENAME = "config.toml"

    # Limites
    MAX_WORKERS = 8

    # Arquivos de conteúdo
    CONTENT_EXTENSIONS = (".md", ".markdown")

    # Variáveis de ambiente
    ENV_CONTENT_DIR = "BLOG_CONTENT_DIR"
    ENV_OUTPUT_DIR = "BLOG_OUTPUT_DIR"
    ENV_MAX_WORKERS = "BLOG_MAX_WORKERS"

    def __init__(
        self,
        content_dir: Path | str | None = None,
        output_dir: Path | str | None = None,
        max_workers: int | None = None,
        site: SiteConfig | None = None,
        write_manifest: bool = True,
    ):
        """
        Args:
            content_dir: Raiz dos arquivos Markdown
            output_dir: Diretório de saída do site
            max_workers: Número máximo de documentos processados em paralelo
            site: Parâmetros do site (usa padrão se None)
            write_manifest: Grava o manifesto Parquet ao final do build
        """
        self.content_dir = Path(content_dir or self.DEFAULT_CONTENT_DIR)
        self.output_dir = Path(output_dir or self.DEFAULT_OUTPUT_DIR)
        self.max_workers = max_workers if max_workers is not None else self.MAX_WORKERS
        self.site = site or SiteConfig()
        self.write_manifest = write_manifest

        self._validate_config()

    def __repr__(self) -> str:
        return (
            f"<BuildConfig content={self.content_dir} output={self.output_dir} "
            f"workers={self.max_workers}>"
        )

    def _validate_config(self) -> None:
        """Valida as configurações."""
        if not self.content_dir.is_dir():
            raise ConfigError(f"Diretório de conteúdo não encontrado: {self.content_dir}")
        if self.max_workers <= 0:
            raise ConfigError(f"Número de workers deve ser positivo: {self.max_workers}")
        if self.output_dir.resolve() == self.content_dir.resolve():
            raise ConfigError(
                f"Diretório de saída não pode ser o diretório de conteúdo: {self.output_dir}"
            )

    @classmethod
    def from_env(cls, **overrides: Any) -> "BuildConfig":
        """
        Cria a configuração combinando variáveis de ambiente e ``overrides``.

        Valores em ``overrides`` diferentes de None têm precedência.
        """
        values: dict[str, Any] = {
            "content_dir": os.environ.get(cls.ENV_CONTENT_DIR),
            "output_dir": os.environ.get(cls.ENV_OUTPUT_DIR),
            "max_workers": None,
        }

        workers = os.environ.get(cls.ENV_MAX_WORKERS)
        if workers:
            try:
                values["max_workers"] = int(workers)
            except ValueError as e:
                raise ConfigError(
                    f"{cls.ENV_MAX_WORKERS} deve ser um inteiro: {workers!r}"
                ) from e

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
