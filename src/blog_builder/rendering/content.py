"""Renderizador de conteúdo: shortcodes + Markdown → HTML final."""

from __future__ import annotations

import re
from uuid import uuid4

from selectolax.lexbor import LexborHTMLParser

from ..models import (
    Document,
    Heading,
    LiteralSegment,
    RenderedDocument,
    ShortcodeInvocation,
)
from ..parsers import ShortcodeScanner
from ..utils import (
    count_words,
    get_document_logger,
    get_logger,
    reading_time,
    truncate_words,
)
from .markdown import MarkdownRenderer, render_toc
from .references import ReferenceTable
from .shortcodes import RenderContext, ShortcodeRegistry

logger = get_logger(__name__)


MORE_MARKER = "<!--more-->"
PLACEHOLDER_PREFIX = "shortcode"


def plain_text(html: str) -> str:
    """Texto visível de um fragmento HTML, com espaços normalizados."""
    if not html.strip():
        return ""
    tree = LexborHTMLParser(html)
    if tree.body is None:
        return ""
    return " ".join(tree.body.text(separator=" ").split())


class ContentRenderer:
    """
    Transforma o corpo de um documento em HTML.

    Os shortcodes são trocados por marcadores opacos antes da conversão
    Markdown e substituídos pela saída dos handlers depois, de modo que o HTML
    dos handlers nunca é reinterpretado e o sumário enxerga todos os cabeçalhos.
    """

    def __init__(
        self,
        registry: ShortcodeRegistry,
        references: ReferenceTable,
        base_url: str = "/",
        toc_threshold: int | None = None,
        excerpt_length: int = 280,
    ):
        """
        Args:
            registry: Registro de shortcodes conhecidos
            references: Tabela de referências entre documentos (passada 1)
            base_url: URL base do site (usada por ``ref``)
            toc_threshold: Tempo de leitura (min) acima do qual o sumário é automático
            excerpt_length: Tamanho máximo do resumo
        """
        self.registry = registry
        self.references = references
        self.base_url = base_url
        self.toc_threshold = toc_threshold
        self.excerpt_length = excerpt_length

        self.scanner = ShortcodeScanner(registry)
        self.markdown = MarkdownRenderer()

    def __repr__(self) -> str:
        return f"<ContentRenderer shortcodes={len(self.registry)} refs={len(self.references)}>"

    def render(self, document: Document) -> RenderedDocument:
        """
        Renderiza um documento.

        Args:
            document: Documento parseado

        Returns:
            RenderedDocument com HTML, cabeçalhos, resumo e tempo de leitura

        Raises:
            UnknownShortcodeError: Shortcode sem handler
            ShortcodeError: Shortcode malformado ou com argumentos inválidos
            CrossReferenceError: Referência a documento inexistente
        """
        context = RenderContext(
            document=document,
            references=self.references,
            render_markdown=lambda text: self._render_fragment(text, context),
            base_url=self.base_url,
        )

        html, headings, invocations, token = self._convert(
            document.body, context, document.line_offset
        )
        context.headings = headings
        html = self._expand(html, invocations, token, context)

        words = count_words(plain_text(html))
        minutes = reading_time(words)
        excerpt = self._excerpt(document, html)

        if self._wants_auto_toc(minutes, headings, invocations):
            html = render_toc(headings) + "\n" + html

        rendered = RenderedDocument(
            document=document,
            html=html,
            headings=headings,
            excerpt=excerpt,
            word_count=words,
            reading_time=minutes,
        )
        get_document_logger(logger, document.slug).debug(
            f"Renderizado em {minutes} min de leitura ({words} palavras)"
        )
        return rendered

    def _convert(
        self, text: str, context: RenderContext, line_offset: int
    ) -> tuple[str, list[Heading], list[ShortcodeInvocation], str]:
        """
        Varre shortcodes, insere marcadores e converte o Markdown.

        O marcador usa um token aleatório por conversão, de modo que nenhum
        texto do documento (inclusive dentro de blocos de código) coincide
        com ele.
        """
        segments = self.scanner.scan(text, context.source, line_offset)
        token = f"{PLACEHOLDER_PREFIX}{uuid4().hex}"

        parts: list[str] = []
        invocations: list[ShortcodeInvocation] = []
        for segment in segments:
            if isinstance(segment, LiteralSegment):
                parts.append(segment.text)
            else:
                parts.append(f"{token}-{len(invocations)}-")
                invocations.append(segment.invocation)

        html, headings = self.markdown.render("".join(parts))
        return html, headings, invocations, token

    def _expand(
        self,
        html: str,
        invocations: list[ShortcodeInvocation],
        token: str,
        context: RenderContext,
    ) -> str:
        """Substitui cada marcador pela saída do handler correspondente."""
        if not invocations:
            return html

        outputs = [
            self.registry.get(invocation.name).expand(invocation, context)
            for invocation in invocations
        ]
        pattern = re.compile(rf"<p>{token}-(\d+)-</p>\n?|{token}-(\d+)-")

        def substitute(match: re.Match) -> str:
            index = int(match.group(1) or match.group(2))
            if index >= len(outputs):
                return match.group(0)
            return outputs[index]

        return pattern.sub(substitute, html)

    def _render_fragment(self, text: str, context: RenderContext) -> str:
        """Renderiza a região interna de um shortcode pareado."""
        html, _, invocations, token = self._convert(text, context, line_offset=0)
        return self._expand(html, invocations, token, context)

    def _wants_auto_toc(
        self,
        minutes: int,
        headings: list[Heading],
        invocations: list[ShortcodeInvocation],
    ) -> bool:
        if self.toc_threshold is None or not headings:
            return False
        if any(invocation.name == "toc" for invocation in invocations):
            return False
        return minutes > self.toc_threshold

    def _excerpt(self, document: Document, html: str) -> str:
        """Resumo: front matter ``summary``, texto antes de ``<!--more-->`` ou primeiro parágrafo."""
        if document.metadata.summary:
            return truncate_words(document.metadata.summary, self.excerpt_length)

        if MORE_MARKER in html:
            return plain_text(html.split(MORE_MARKER, 1)[0])

        tree = LexborHTMLParser(html)
        paragraph = tree.css_first("body > p")
        if paragraph is None:
            return ""
        return truncate_words(paragraph.text(separator=""), self.excerpt_length)
