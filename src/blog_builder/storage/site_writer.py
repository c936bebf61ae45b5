"""Escrita do site: páginas HTML via Jinja2, listagens paginadas e feed RSS."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from blog_builder.models import AssembledSite, Listing, RenderedDocument
from blog_builder.rendering import render_rss
from blog_builder.storage.base import StorageBackend
from blog_builder.utils import format_date, get_logger, term_key

if TYPE_CHECKING:
    from blog_builder.core.config import SiteConfig

logger = get_logger(__name__)


TAXONOMY_HEADINGS = {"tags": "Tags", "categories": "Categories", "series": "Series"}


class SiteWriter:
    """
    Converte o site montado em arquivos.

    Layout de saída:
     - ``<slug>/index.html`` por documento (rascunhos incluídos)
     - ``index.html`` e ``page/<n>/index.html`` para o índice cronológico
     - ``tags/<tag>/index.html``, ``categories/<cat>/index.html``,
       ``series/<serie>/index.html`` e uma página de termos por taxonomia
     - ``index.xml`` com o feed RSS
    """

    def __init__(self, backend: StorageBackend, site_config: SiteConfig):
        self.backend = backend
        self.site_config = site_config
        self.env = Environment(
            loader=PackageLoader("blog_builder", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["date"] = format_date
        self.env.filters["term_key"] = term_key

    def __repr__(self) -> str:
        return f"<SiteWriter backend={self.backend!r}>"

    @staticmethod
    def document_path(slug: str) -> str:
        return f"{slug}/index.html"

    @staticmethod
    def index_page_path(number: int) -> str:
        return "index.html" if number == 1 else f"page/{number}/index.html"

    @staticmethod
    def index_page_url(number: int) -> str:
        return "/" if number == 1 else f"/page/{number}/"

    def _render(self, template: str, **context: Any) -> str:
        return self.env.get_template(template).render(site=self.site_config, **context)

    def write_document(self, rendered: RenderedDocument, site: AssembledSite) -> str:
        """Grava a página individual de um documento."""
        series = None
        if rendered.metadata.series and not rendered.draft:
            series = site.series.get(term_key(rendered.metadata.series))

        html = self._render("page.html", page=rendered, series=series)
        path = self.document_path(rendered.slug)
        self.backend.write_text(path, html)
        return path

    def write_index(self, site: AssembledSite) -> list[str]:
        """Grava o índice cronológico dividido em páginas de ``paginate`` entradas."""
        per_page = self.site_config.paginate
        entries = list(site.index.entries)
        chunks = [entries[i : i + per_page] for i in range(0, len(entries), per_page)] or [[]]
        total = len(chunks)

        paths = []
        for number, chunk in enumerate(chunks, start=1):
            pager = {
                "number": number,
                "total": total,
                "prev": self.index_page_url(number - 1) if number > 1 else None,
                "next": self.index_page_url(number + 1) if number < total else None,
            }
            html = self._render(
                "list.html",
                listing=site.index,
                heading=self.site_config.title,
                entries=chunk,
                pager=pager,
            )
            path = self.index_page_path(number)
            self.backend.write_text(path, html)
            paths.append(path)

        logger.debug(f"Índice gravado em {total} páginas")
        return paths

    def write_listing(self, listing: Listing) -> str:
        heading = f"{TAXONOMY_HEADINGS.get(listing.kind, listing.kind)}: {listing.name}"
        html = self._render(
            "list.html",
            listing=listing,
            heading=heading,
            entries=listing.entries,
            pager=None,
        )
        path = f"{listing.kind}/{listing.key}/index.html"
        self.backend.write_text(path, html)
        return path

    def write_terms(self, kind: str, listings: dict[str, Listing]) -> str:
        html = self._render(
            "terms.html",
            kind=kind,
            heading=TAXONOMY_HEADINGS.get(kind, kind),
            listings=list(listings.values()),
        )
        path = f"{kind}/index.html"
        self.backend.write_text(path, html)
        return path

    def write_feed(self, site: AssembledSite) -> str:
        entries = list(site.index.entries[: self.site_config.rss_limit])
        xml = render_rss(
            title=self.site_config.title,
            base_url=self.site_config.base_url,
            description=self.site_config.description,
            entries=entries,
            language=self.site_config.language,
        )
        path = "index.xml"
        self.backend.write_text(path, xml)
        return path

    def write_site(self, site: AssembledSite) -> list[str]:
        """
        Grava todas as páginas do site.

        Returns:
            Lista de paths gravados, na ordem de escrita

        Raises:
            OutputWriteError: Falha de escrita (aborta o build)
        """
        written: list[str] = []

        for rendered in sorted(site.snapshot, key=lambda r: r.slug):
            written.append(self.write_document(rendered, site))

        written.extend(self.write_index(site))

        for kind in ("tags", "categories", "series"):
            listings: dict[str, Listing] = getattr(site, kind)
            if not listings:
                continue
            written.append(self.write_terms(kind, listings))
            for listing in listings.values():
                written.append(self.write_listing(listing))

        written.append(self.write_feed(site))

        logger.info(f"Gravados {len(written)} arquivos")
        return written
