"""Hierarquia de exceções do build do site."""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Exceção base para todos os erros do build."""


class ConfigError(BuildError):
    """Configuração inválida, detectada antes do build começar."""


class DocumentError(BuildError):
    """Erro restrito a um único documento.

    Nunca atravessa a fronteira do documento: o builder captura e anexa ao
    relatório final.
    """

    def __init__(self, message: str, source: str | Path | None = None):
        self.source = str(source) if source is not None else None
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class MetadataError(DocumentError):
    """Front matter malformado (delimitador aberto, YAML inválido, tipos)."""

    def __init__(
        self, message: str, source: str | Path | None = None, line: int | None = None
    ):
        self.line = line
        super().__init__(message, source)

    def _format(self) -> str:
        location = self.source or "<string>"
        if self.line is not None:
            location = f"{location}:{self.line}"
        return f"{location}: {self.message}"


class ShortcodeError(DocumentError):
    """Erro genérico ao expandir um shortcode."""


class UnknownShortcodeError(ShortcodeError):
    """Shortcode sem handler registrado."""

    def __init__(self, name: str, source: str | Path | None = None):
        self.name = name
        super().__init__(f"shortcode desconhecido '{name}'", source)


class ShortcodeSyntaxError(ShortcodeError):
    """Marcador de shortcode não terminado ou sem fechamento."""


class ShortcodeArgumentError(ShortcodeError):
    """Argumentos inválidos para um shortcode conhecido."""


class CrossReferenceError(DocumentError):
    """Referência a um documento que não existe no conjunto."""

    def __init__(self, name: str, source: str | Path | None = None):
        self.name = name
        super().__init__(f"referência não resolvida '{name}'", source)


class SourceReadError(DocumentError):
    """Arquivo de conteúdo não pôde ser lido ou decodificado."""


class DuplicateSlugError(DocumentError):
    """Dois arquivos de conteúdo geram o mesmo slug."""


class BuildCancelledError(DocumentError):
    """Documento não processado porque o build foi interrompido."""


class OutputWriteError(BuildError, OSError):
    """Falha ao gravar a saída. Único erro que aborta o build inteiro."""

    def __init__(self, path: str | Path, reason: Exception | str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Erro ao gravar {self.path}: {reason}")
