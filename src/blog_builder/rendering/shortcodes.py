"""Registro tipado de shortcodes e handlers embutidos."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import Callable, Iterator
from urllib.parse import parse_qs, urlparse

from ..exceptions import ConfigError, ShortcodeArgumentError
from ..models import Document, Heading, ShortcodeInvocation
from ..utils import get_logger
from .markdown import render_toc
from .references import ReferenceTable

logger = get_logger(__name__)


NOTICE_LEVELS = {
    "note": "Note",
    "tip": "Tip",
    "info": "Info",
    "warning": "Warning",
    "error": "Error",
}

_NAME_RE = re.compile(r"^[A-Za-z][\w-]*$")
_YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be")
_VIMEO_HOSTS = ("vimeo.com", "www.vimeo.com", "player.vimeo.com")


@dataclass
class RenderContext:
    """Estado disponível para os handlers durante a renderização de um documento."""

    document: Document
    references: ReferenceTable
    render_markdown: Callable[[str], str]
    headings: list[Heading] = field(default_factory=list)
    base_url: str = "/"

    @property
    def source(self) -> Path:
        return self.document.source_path


ShortcodeFunc = Callable[[ShortcodeInvocation, RenderContext], str]


@dataclass(frozen=True)
class ShortcodeHandler:
    """Handler de um shortcode: nome, função de expansão e se exige fechamento."""

    name: str
    func: ShortcodeFunc
    paired: bool = False
    description: str = ""

    def expand(self, invocation: ShortcodeInvocation, context: RenderContext) -> str:
        return self.func(invocation, context)


class ShortcodeRegistry:
    """Mapeamento explícito nome → handler, validado na inicialização."""

    def __init__(self, handlers: list[ShortcodeHandler] | None = None):
        self._handlers: dict[str, ShortcodeHandler] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: ShortcodeHandler) -> None:
        """
        Registra um handler.

        Raises:
            ConfigError: Nome inválido, duplicado ou função não chamável
        """
        if not _NAME_RE.match(handler.name or ""):
            raise ConfigError(f"Nome de shortcode inválido: {handler.name!r}")
        if handler.name in self._handlers:
            raise ConfigError(f"Shortcode '{handler.name}' registrado duas vezes")
        if not callable(handler.func):
            raise ConfigError(f"Handler do shortcode '{handler.name}' não é chamável")
        self._handlers[handler.name] = handler

    def add(
        self, name: str, func: ShortcodeFunc, paired: bool = False, description: str = ""
    ) -> None:
        self.register(ShortcodeHandler(name, func, paired, description))

    def get(self, name: str) -> ShortcodeHandler | None:
        return self._handlers.get(name)

    def validate(self) -> None:
        """Revalida todos os handlers (chamado no início do build)."""
        if not self._handlers:
            logger.warning("Registro de shortcodes vazio")
        for name, handler in self._handlers.items():
            if name != handler.name or not callable(handler.func):
                raise ConfigError(f"Registro de shortcodes inconsistente em '{name}'")
        logger.debug(f"Shortcodes registrados: {self.names}")

    @property
    def names(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[ShortcodeHandler]:
        return iter(self._handlers.values())

    def __len__(self) -> int:
        return len(self._handlers)

    def __repr__(self) -> str:
        return f"<ShortcodeRegistry names={self.names}>"


# ============================================================================
# Handlers embutidos
# ============================================================================


def _iframe(src: str, title: str) -> str:
    return (
        '<div class="video-embed">'
        f'<iframe src="{escape(src)}" title="{escape(title)}" frameborder="0" '
        'allow="accelerometer; autoplay; encrypted-media; gyroscope; picture-in-picture" '
        "allowfullscreen></iframe></div>"
    )


def _youtube_id(url: str) -> str | None:
    parsed = urlparse(url)
    host = parsed.netloc.lower()
    if host not in _YOUTUBE_HOSTS:
        return None
    if host == "youtu.be":
        return parsed.path.strip("/") or None
    if parsed.path.startswith("/embed/"):
        return parsed.path.split("/")[2] or None
    return parse_qs(parsed.query).get("v", [None])[0]


def _vimeo_id(url: str) -> str | None:
    parsed = urlparse(url)
    if parsed.netloc.lower() not in _VIMEO_HOSTS:
        return None
    digits = [part for part in parsed.path.split("/") if part.isdigit()]
    return digits[-1] if digits else None


def video_shortcode(invocation: ShortcodeInvocation, context: RenderContext) -> str:
    """``{{< video "https://..." >}}``: iframe para YouTube/Vimeo, <video> nos demais."""
    url = invocation.arg(0, "src") or invocation.kwargs.get("url")
    if not url:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: 'video' exige uma URL", context.source
        )

    title = invocation.kwargs.get("title", "Video")

    video_id = _youtube_id(url)
    if video_id:
        return _iframe(f"https://www.youtube-nocookie.com/embed/{video_id}", title)

    video_id = _vimeo_id(url)
    if video_id:
        return _iframe(f"https://player.vimeo.com/video/{video_id}", title)

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https", "") or not parsed.path:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: URL de vídeo inválida {url!r}", context.source
        )
    return (
        f'<video class="video-embed" controls preload="metadata" src="{escape(url)}">'
        f'<a href="{escape(url)}">{escape(title)}</a></video>'
    )


def youtube_shortcode(invocation: ShortcodeInvocation, context: RenderContext) -> str:
    video_id = invocation.arg(0, "id")
    if not video_id:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: 'youtube' exige o id do vídeo", context.source
        )
    title = invocation.kwargs.get("title", "YouTube video")
    return _iframe(f"https://www.youtube-nocookie.com/embed/{video_id}", title)


def toc_shortcode(invocation: ShortcodeInvocation, context: RenderContext) -> str:
    if invocation.args or invocation.kwargs:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: 'toc' não aceita argumentos", context.source
        )
    return render_toc(context.headings)


def notice_shortcode(invocation: ShortcodeInvocation, context: RenderContext) -> str:
    """``{{< notice tip >}} ... {{< /notice >}}``: caixa de aviso."""
    level = (invocation.arg(0, "level") or "").lower()
    if level not in NOTICE_LEVELS:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: nível de notice inválido {level!r} "
            f"(esperado um de {', '.join(NOTICE_LEVELS)})",
            context.source,
        )

    title = invocation.kwargs.get("title", NOTICE_LEVELS[level])
    content = context.render_markdown(invocation.inner or "")
    return (
        f'<div class="notice notice-{level}">'
        f'<p class="notice-title">{escape(title)}</p>'
        f'<div class="notice-content">{content}</div>'
        "</div>"
    )


def ref_shortcode(invocation: ShortcodeInvocation, context: RenderContext) -> str:
    """``{{< ref "outro-post" >}}``: URL absoluta do documento referenciado."""
    name = invocation.arg(0, "path")
    if not name:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: 'ref' exige o nome do documento", context.source
        )
    url = context.references.resolve(name, source=context.source)
    return escape(context.base_url.rstrip("/") + url)


def relref_shortcode(invocation: ShortcodeInvocation, context: RenderContext) -> str:
    name = invocation.arg(0, "path")
    if not name:
        raise ShortcodeArgumentError(
            f"linha {invocation.line}: 'relref' exige o nome do documento",
            context.source,
        )
    return escape(context.references.resolve(name, source=context.source))


def default_registry() -> ShortcodeRegistry:
    """Registro com os shortcodes embutidos."""
    return ShortcodeRegistry(
        [
            ShortcodeHandler("video", video_shortcode, description="Vídeo embutido"),
            ShortcodeHandler("youtube", youtube_shortcode, description="Vídeo do YouTube"),
            ShortcodeHandler("toc", toc_shortcode, description="Sumário"),
            ShortcodeHandler(
                "notice", notice_shortcode, paired=True, description="Caixa de aviso"
            ),
            ShortcodeHandler("ref", ref_shortcode, description="Link absoluto"),
            ShortcodeHandler("relref", relref_shortcode, description="Link relativo"),
        ]
    )
