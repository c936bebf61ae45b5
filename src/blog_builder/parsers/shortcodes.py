"""Scanner de shortcodes no corpo dos documentos."""

from __future__ import annotations

import re
import shlex
from pathlib import Path
from typing import TYPE_CHECKING

from ..exceptions import ShortcodeSyntaxError, UnknownShortcodeError
from ..models import LiteralSegment, Segment, ShortcodeInvocation, ShortcodeSegment
from ..utils import get_logger

if TYPE_CHECKING:
    from ..rendering.shortcodes import ShortcodeRegistry

logger = get_logger(__name__)


_MARKERS = {"{{<": ">}}", "{{%": "%}}"}
_ESCAPED_MARKERS = {"{{</*": "*/>}}", "{{%/*": "*/%}}"}

_INTERESTING_RE = re.compile(r"\n|`+|\{\{[<%]")
_FENCE_OPEN_RE = re.compile(r" {0,3}(`{3,}|~{3,})[^\n]*")
_KWARG_RE = re.compile(r"^([A-Za-z_][\w-]*)=(.*)$", re.S)


class ShortcodeScanner:
    """
    Varre o corpo da esquerda para a direita, alternando trechos literais e
    shortcodes delimitados por ``{{< ... >}}``.

    Blocos de código cercados e spans de código inline são copiados sem
    alteração: shortcodes dentro deles nunca são expandidos.
    """

    def __init__(self, registry: ShortcodeRegistry):
        self.registry = registry

    def scan(
        self, text: str, source: str | Path | None = None, line_offset: int = 0
    ) -> list[Segment]:
        """
        Divide o texto em segmentos literais e de shortcode.

        Args:
            text: Corpo do documento
            source: Identificador do documento (para mensagens de erro)
            line_offset: Linhas que antecedem o corpo no arquivo original

        Returns:
            Lista ordenada de LiteralSegment e ShortcodeSegment

        Raises:
            UnknownShortcodeError: Shortcode sem handler registrado
            ShortcodeSyntaxError: Marcador não terminado ou par sem fechamento
        """
        segments: list[Segment] = []
        buffer: list[str] = []
        pos = 0
        line = 1 + line_offset
        at_line_start = True

        def flush() -> None:
            chunk = "".join(buffer)
            buffer.clear()
            if chunk:
                segments.append(LiteralSegment(chunk))

        while pos < len(text):
            if at_line_start:
                fence = _FENCE_OPEN_RE.match(text, pos)
                if fence:
                    end = _fence_end(text, fence)
                    chunk = text[pos:end]
                    buffer.append(chunk)
                    line += chunk.count("\n")
                    pos = end
                    continue
            at_line_start = False

            match = _INTERESTING_RE.search(text, pos)
            if not match:
                buffer.append(text[pos:])
                break

            buffer.append(text[pos : match.start()])
            token = match.group()

            if token == "\n":
                buffer.append(token)
                line += 1
                pos = match.end()
                at_line_start = True
                continue

            if token.startswith("`"):
                end = _code_span_end(text, match)
                chunk = text[match.start() : end]
                buffer.append(chunk)
                line += chunk.count("\n")
                pos = end
                continue

            escaped = self._read_escaped(text, match.start())
            if escaped is not None:
                literal, end = escaped
                buffer.append(literal)
                line += text[match.start() : end].count("\n")
                pos = end
                continue

            invocation, end = self._read_shortcode(text, match.start(), line, source)
            flush()
            segments.append(ShortcodeSegment(invocation))
            line += text[match.start() : end].count("\n")
            pos = end

        flush()
        return segments

    def _read_escaped(self, text: str, start: int) -> tuple[str, int] | None:
        """Trata ``{{</* nome */>}}``, que produz o shortcode literal."""
        for opener, closer in _ESCAPED_MARKERS.items():
            if text.startswith(opener, start):
                end = text.find(closer, start + len(opener))
                if end == -1:
                    return None
                inner = text[start + len(opener) : end]
                literal = f"{opener[:3]}{inner}{closer[2:]}"
                return literal, end + len(closer)
        return None

    def _read_shortcode(
        self, text: str, start: int, line: int, source: str | Path | None
    ) -> tuple[ShortcodeInvocation, int]:
        opener = text[start : start + 3]
        closer = _MARKERS[opener]

        end = text.find(closer, start + 3)
        if end == -1:
            raise ShortcodeSyntaxError(
                f"linha {line}: shortcode não terminado (falta '{closer}')", source
            )

        raw = text[start + 3 : end].strip()
        pos = end + 3

        self_closing = raw.endswith("/")
        if self_closing:
            raw = raw[:-1].rstrip()

        if not raw:
            raise ShortcodeSyntaxError(f"linha {line}: shortcode vazio", source)
        if raw.startswith("/"):
            raise ShortcodeSyntaxError(
                f"linha {line}: fechamento '{raw}' sem abertura correspondente", source
            )

        try:
            tokens = shlex.split(raw)
        except ValueError as e:
            raise ShortcodeSyntaxError(f"linha {line}: argumentos inválidos ({e})", source)

        name, rest = tokens[0], tokens[1:]
        handler = self.registry.get(name)
        if handler is None:
            raise UnknownShortcodeError(name, source)

        args: list[str] = []
        kwargs: dict[str, str] = {}
        for token in rest:
            kwarg = _KWARG_RE.match(token)
            if kwarg:
                kwargs[kwarg.group(1)] = kwarg.group(2)
            else:
                args.append(token)

        inner = None
        if handler.paired and not self_closing:
            inner, pos = self._read_inner(text, pos, name, line, source)

        invocation = ShortcodeInvocation(
            name=name,
            args=tuple(args),
            kwargs=kwargs,
            inner=inner,
            line=line,
        )
        logger.debug(f"{source}: shortcode {invocation!r}")
        return invocation, pos

    @staticmethod
    def _read_inner(
        text: str, pos: int, name: str, line: int, source: str | Path | None
    ) -> tuple[str, int]:
        """Lê a região de conteúdo até o ``{{< /nome >}}`` correspondente."""
        tag_re = re.compile(
            rf"\{{\{{[<%]\s*(/?)\s*{re.escape(name)}(?![\w-])(.*?)[>%]\}}\}}", re.S
        )
        depth = 1
        for tag in tag_re.finditer(text, pos):
            if tag.group(1):
                depth -= 1
                if depth == 0:
                    return text[pos : tag.start()], tag.end()
            elif not tag.group(2).rstrip().endswith("/"):
                depth += 1

        raise ShortcodeSyntaxError(
            f"linha {line}: shortcode '{name}' sem fechamento {{{{< /{name} >}}}}",
            source,
        )


def _fence_end(text: str, fence: re.Match) -> int:
    """Posição logo após o fechamento do bloco cercado (ou fim do texto)."""
    marker = fence.group(1)
    closing = re.compile(
        rf"^ {{0,3}}{re.escape(marker[0])}{{{len(marker)},}}[ \t]*$", re.M
    )
    first_line_end = text.find("\n", fence.end())
    if first_line_end == -1:
        return len(text)

    match = closing.search(text, first_line_end + 1)
    if not match:
        return len(text)

    end = match.end()
    if end < len(text) and text[end] == "\n":
        end += 1
    return end


def _code_span_end(text: str, opening: re.Match) -> int:
    """Fim do span de código inline; spans não atravessam parágrafos."""
    run = len(opening.group())
    paragraph_end = text.find("\n\n", opening.end())
    limit = paragraph_end if paragraph_end != -1 else len(text)

    closing = re.compile(rf"(?<!`)`{{{run}}}(?!`)")
    match = closing.search(text, opening.end(), limit)
    if not match:
        return opening.end()
    return match.end()
