"""Orquestrador principal do build."""

import asyncio
from datetime import datetime, timezone
from pathlib import Path

from blog_builder.core.concurrent import ConcurrentRunner
from blog_builder.core.config import BuildConfig
from blog_builder.exceptions import (
    BuildCancelledError,
    DocumentError,
    DuplicateSlugError,
    SourceReadError,
)
from blog_builder.models import (
    AssembledSite,
    BuildReport,
    Document,
    DocumentFailure,
    RenderedDocument,
    SiteSnapshot,
)
from blog_builder.parsers import FrontMatterParser
from blog_builder.processors import SiteAssembler
from blog_builder.rendering import (
    ContentRenderer,
    ReferenceTable,
    ShortcodeRegistry,
    default_registry,
)
from blog_builder.storage import LocalBackend, ManifestStorage, SiteWriter, StorageBackend
from blog_builder.utils import get_document_logger, get_logger, slugify

logger = get_logger(__name__)


class SiteBuilder:
    """
    Orquestrador do build do blog.

    Fases:
     1. leitura e parse de todos os documentos (paralelo)
     2. tabela de referências a partir dos documentos parseados (barreira)
     3. renderização de cada documento (paralelo)
     4. snapshot imutável, montagem das coleções e escrita da saída

    Erros de um documento o excluem do site e são reportados no BuildReport;
    apenas falhas de escrita (OutputWriteError) abortam o build.
    """

    def __init__(
        self,
        config: BuildConfig | None = None,
        storage: StorageBackend | None = None,
        registry: ShortcodeRegistry | None = None,
        stop_event: asyncio.Event | None = None,
    ):
        """
        Args:
            config: Configuração do build (usa padrão se None)
            storage: Backend de saída (LocalBackend em ``config.output_dir`` se None)
            registry: Registro de shortcodes (usa os embutidos se None)
            stop_event: Evento de interrupção compartilhado com o chamador
        """
        self.config = config or BuildConfig()

        self.registry = registry or default_registry()
        self.registry.validate()

        self.storage = storage or LocalBackend(self.config.output_dir)
        self.runner = ConcurrentRunner(
            max_workers=self.config.max_workers, stop_event=stop_event
        )
        self.frontmatter_parser = FrontMatterParser()
        self.assembler = SiteAssembler()
        self.writer = SiteWriter(self.storage, self.config.site)
        self.manifest = ManifestStorage(self.storage) if self.config.write_manifest else None

    def __repr__(self) -> str:
        return f"<SiteBuilder content={self.config.content_dir} storage={self.storage!r}>"

    def request_stop(self) -> None:
        """Interrompe o build: documentos ainda não iniciados são ignorados."""
        self.runner.stop()

    def discover_documents(self) -> list[Path]:
        """Lista os arquivos Markdown sob a raiz de conteúdo, em ordem."""
        root = self.config.content_dir
        paths = [
            path
            for path in root.rglob("*")
            if path.is_file()
            and path.suffix.lower() in self.config.CONTENT_EXTENSIONS
            and not path.stem.startswith("_")
        ]
        paths.sort(key=lambda p: p.relative_to(root).as_posix())
        logger.info(f"📂 Encontrados {len(paths)} documentos em {root}")
        return paths

    def slug_for(self, path: Path) -> str:
        """
        Slug a partir do caminho relativo à raiz de conteúdo.

        ``posts/Hello World.md`` → ``posts/hello-world``;
        ``posts/serie/index.md`` → ``posts/serie``.
        """
        relative = path.relative_to(self.config.content_dir).with_suffix("")
        parts = [slugify(part) or part.lower() for part in relative.parts]
        if len(parts) > 1 and parts[-1] == "index":
            parts.pop()
        return "/".join(parts)

    def load_document(self, path: Path) -> Document:
        """
        Lê e parseia um arquivo de conteúdo.

        Raises:
            SourceReadError: Arquivo ilegível ou com encoding inválido
            MetadataError: Front matter inválido
        """
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"não foi possível ler o arquivo: {e}", path) from e

        metadata, body = self.frontmatter_parser.parse(text, source=path)
        slug = self.slug_for(path)

        if not metadata.title:
            metadata.title = slug.rsplit("/", 1)[-1].replace("-", " ").title()

        line_offset = text.count("\n") - body.count("\n")
        return Document(
            slug=slug,
            source_path=path,
            metadata=metadata,
            body=body,
            line_offset=line_offset,
        )

    def _failure(
        self, path: Path, slug: str, result: BaseException | None
    ) -> DocumentFailure:
        """Converte o resultado de uma tarefa que não produziu documento."""
        doc_logger = get_document_logger(logger, slug)
        if result is None:
            error: DocumentError = BuildCancelledError(
                "build interrompido antes do processamento", path
            )
        elif isinstance(result, DocumentError):
            error = result
        else:
            doc_logger.exception(f"Erro inesperado em {path}", exc_info=result)
            error = DocumentError(f"erro inesperado: {result!r}", path)

        if not isinstance(error, BuildCancelledError):
            doc_logger.warning(f"⚠️ Documento ignorado: {error}")
        return DocumentFailure(slug=slug, source_path=path, error=error)

    async def parse_batch(
        self, paths: list[Path]
    ) -> tuple[list[Document], list[DocumentFailure]]:
        """
        Fase 1: leitura e parse concorrentes.

        Returns:
            Tupla com (documentos parseados, falhas)
        """
        logger.info(f"Parseando {len(paths)} documentos...")
        results = await self.runner.run_all(paths, self.load_document)

        documents: list[Document] = []
        failures: list[DocumentFailure] = []
        seen: dict[str, Path] = {}

        for path, result in zip(paths, results):
            if not isinstance(result, Document):
                failures.append(self._failure(path, self.slug_for(path), result))
                continue

            if result.slug in seen:
                error = DuplicateSlugError(
                    f"slug '{result.slug}' já usado por {seen[result.slug]}", path
                )
                failures.append(self._failure(path, result.slug, error))
                continue

            seen[result.slug] = path
            documents.append(result)

        logger.info(f"Parseados {len(documents)}/{len(paths)} documentos")
        return documents, failures

    def build_references(self, documents: list[Document]) -> ReferenceTable:
        """Barreira entre as fases: tabela de referências de todos os documentos."""
        return ReferenceTable.build(documents, content_root=self.config.content_dir)

    def create_renderer(self, references: ReferenceTable) -> ContentRenderer:
        site = self.config.site
        return ContentRenderer(
            registry=self.registry,
            references=references,
            base_url=site.base_url,
            toc_threshold=site.toc_reading_time_threshold,
        )

    async def render_batch(
        self, documents: list[Document], references: ReferenceTable
    ) -> tuple[list[RenderedDocument], list[DocumentFailure]]:
        """
        Fase 2: renderização concorrente.

        Returns:
            Tupla com (documentos renderizados, falhas)
        """
        logger.info(f"Renderizando {len(documents)} documentos...")
        renderer = self.create_renderer(references)
        results = await self.runner.run_all(documents, renderer.render)

        rendered: list[RenderedDocument] = []
        failures: list[DocumentFailure] = []

        for document, result in zip(documents, results):
            if isinstance(result, RenderedDocument):
                rendered.append(result)
            else:
                failures.append(
                    self._failure(document.source_path, document.slug, result)
                )

        logger.info(f"Renderizados {len(rendered)}/{len(documents)} documentos")
        return rendered, failures

    def assemble(self, rendered: list[RenderedDocument]) -> AssembledSite:
        """Congela o snapshot e calcula as coleções derivadas."""
        snapshot = SiteSnapshot(rendered)
        return self.assembler.assemble(snapshot)

    def write_output(self, site: AssembledSite, report: BuildReport) -> list[str]:
        """
        Grava o site e o manifesto.

        Raises:
            OutputWriteError: Falha de escrita
        """
        written = self.writer.write_site(site)
        if self.manifest:
            written.append(self.manifest.save(site.snapshot, report))
        return written

    async def run(self) -> BuildReport:
        """
        Executa o build completo.

        Returns:
            BuildReport com publicados, rascunhos excluídos e falhas

        Raises:
            OutputWriteError: Falha ao gravar a saída
        """
        report = BuildReport(start_time=datetime.now(timezone.utc))
        logger.info(f"🚀 Iniciando build de {self.config.content_dir}")

        paths = self.discover_documents()
        documents, failures = await self.parse_batch(paths)
        report.failures.extend(failures)

        references = self.build_references(documents)
        rendered, failures = await self.render_batch(documents, references)
        report.failures.extend(failures)
        report.failures.sort(key=lambda failure: failure.slug)

        site = self.assemble(rendered)
        report.published = site.published
        report.drafts = list(site.drafts)

        if self.runner.stopped:
            logger.warning(
                f"⚠️ Build interrompido; {report.total_skipped} documentos não processados"
            )

        report.end_time = datetime.now(timezone.utc)
        report.written = self.write_output(site, report)

        logger.info(
            f"✅ Build concluído: {report.total_published} publicados, "
            f"{report.total_drafts} rascunhos excluídos, "
            f"{report.total_skipped} ignorados em {report.execution_time:.2f}s"
        )
        return report
