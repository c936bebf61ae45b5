"""Tabela de referências entre documentos (resolução em duas passadas)."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Iterable

from ..exceptions import CrossReferenceError
from ..models import Document
from ..utils import get_logger

logger = get_logger(__name__)


_EXTENSIONS = (".md", ".markdown")


def normalize_reference(name: str) -> str:
    """
    Normaliza um nome lógico de documento.

    ``/posts/Foo.md``, ``posts/foo/`` e ``posts/foo/index.md`` viram ``posts/foo``.
    """
    key = name.strip().strip("/").lower()
    for extension in _EXTENSIONS:
        if key.endswith(extension):
            key = key[: -len(extension)]
            break
    for suffix in ("/index", "/_index"):
        if key.endswith(suffix):
            key = key[: -len(suffix)]
    return key


class ReferenceTable:
    """
    Mapeamento nome lógico → slug, construído a partir de todos os documentos
    parseados (passada 1) e consultado na renderização (passada 2).
    """

    def __init__(self, names: dict[str, str], urls: dict[str, str]):
        self._names = MappingProxyType(dict(names))
        self._urls = MappingProxyType(dict(urls))

    @classmethod
    def build(
        cls, documents: Iterable[Document], content_root: Path | None = None
    ) -> "ReferenceTable":
        """
        Constrói a tabela a partir do conjunto completo de documentos.

        Cada documento é registrado pelo slug, pelo caminho do arquivo relativo
        a ``content_root`` (com ou sem extensão) e, quando não houver
        ambiguidade, pelo nome do arquivo.
        """
        documents = list(documents)
        names: dict[str, str] = {}
        urls: dict[str, str] = {}
        stems: dict[str, list[str]] = {}

        for document in documents:
            names[document.slug] = document.slug
            urls[document.slug] = document.url

        for document in documents:
            source = Path(document.source_path)
            if content_root is not None and source.is_relative_to(content_root):
                relative = normalize_reference(source.relative_to(content_root).as_posix())
                names.setdefault(relative, document.slug)

            candidates = {document.slug.rsplit("/", 1)[-1], normalize_reference(source.stem)}
            for stem in candidates - {"index", "_index", ""}:
                stems.setdefault(stem, []).append(document.slug)

        for stem, slugs in stems.items():
            if stem in names:
                continue
            if len(slugs) == 1:
                names[stem] = slugs[0]
            else:
                logger.debug(f"Nome '{stem}' ambíguo entre {slugs}; exige caminho completo")

        logger.debug(f"Tabela de referências com {len(names)} nomes")
        return cls(names, urls)

    def lookup(self, name: str) -> str | None:
        """Retorna o slug correspondente ao nome, ou None."""
        return self._names.get(normalize_reference(name))

    def resolve(self, name: str, source: str | Path | None = None) -> str:
        """
        Resolve um nome lógico (com âncora opcional) para a URL do documento.

        Raises:
            CrossReferenceError: Se o nome não corresponder a nenhum documento
        """
        target, _, anchor = name.partition("#")
        slug = self.lookup(target) if target else None
        if slug is None:
            raise CrossReferenceError(name, source)

        url = self._urls[slug]
        return f"{url}#{anchor}" if anchor else url

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"<ReferenceTable names={len(self._names)}>"
