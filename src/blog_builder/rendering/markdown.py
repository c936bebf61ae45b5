"""Conversão Markdown → HTML com markdown-it-py."""

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml
from markdown_it.token import Token

from ..models import Heading
from ..utils import get_logger, slugify

logger = get_logger(__name__)


TOC_LEVELS = (2, 3, 4)

# Blocos renderizados no cliente (mermaid.js) em vez de destacados como código
CLIENT_RENDERED_LANGUAGES = ("mermaid",)


def _render_fence(renderer, tokens, idx, options, env):
    token = tokens[idx]
    language = token.info.strip().split(maxsplit=1)[0] if token.info.strip() else ""
    if language in CLIENT_RENDERED_LANGUAGES:
        return f'<div class="{language}">{escapeHtml(token.content)}</div>\n'
    return renderer.fence(tokens, idx, options, env)


class MarkdownRenderer:
    """
    Converte Markdown em HTML.

    - CommonMark + tabelas + tachado, HTML bruto permitido
    - Cabeçalhos recebem ids estáveis (slug, com sufixo em duplicatas)
    - Blocos de código mantêm ``class="language-<lang>"`` para destaque posterior
    """

    def __init__(self):
        self.md = MarkdownIt("commonmark", {"html": True}).enable(
            ["table", "strikethrough"]
        )
        self.md.add_render_rule("fence", _render_fence)

    def render(self, text: str) -> tuple[str, list[Heading]]:
        """
        Renderiza Markdown e coleta os cabeçalhos.

        Args:
            text: Markdown de entrada

        Returns:
            Tupla (HTML, lista de Heading em ordem de aparição)
        """
        tokens = self.md.parse(text)
        headings = self._assign_heading_ids(tokens)
        html = self.md.renderer.render(tokens, self.md.options, {})
        return html, headings

    def render_fragment(self, text: str) -> str:
        html, _ = self.render(text)
        return html

    @staticmethod
    def _assign_heading_ids(tokens: list[Token]) -> list[Heading]:
        headings: list[Heading] = []
        seen: dict[str, int] = {}

        for index, token in enumerate(tokens):
            if token.type != "heading_open":
                continue

            inline = tokens[index + 1]
            text = "".join(
                child.content
                for child in inline.children or []
                if child.type in ("text", "code_inline")
            ).strip()

            anchor = token.attrGet("id") or slugify(text) or "section"
            if anchor in seen:
                seen[anchor] += 1
                anchor = f"{anchor}-{seen[anchor]}"
            else:
                seen[anchor] = 0

            token.attrSet("id", anchor)
            headings.append(Heading(level=int(token.tag[1:]), text=text, anchor=anchor))

        return headings


def render_toc(headings: list[Heading], levels: tuple[int, ...] = TOC_LEVELS) -> str:
    """Gera sumário em listas aninhadas a partir dos cabeçalhos."""
    entries = [h for h in headings if h.level in levels]
    if not entries:
        return ""

    parts = ['<nav class="toc">']
    base = min(h.level for h in entries)
    depth = 0

    for heading in entries:
        target = heading.level - base + 1
        if target > depth:
            while depth < target:
                parts.append("<ul>")
                depth += 1
        else:
            parts.append("</li>")
            while depth > target:
                parts.append("</ul></li>")
                depth -= 1
        parts.append(
            f'<li><a href="#{escapeHtml(heading.anchor)}">{escapeHtml(heading.text)}</a>'
        )

    parts.append("</li>")
    while depth > 1:
        parts.append("</ul></li>")
        depth -= 1
    parts.append("</ul></nav>")
    return "".join(parts)
