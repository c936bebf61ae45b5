"""Script CLI principal para o build do blog."""

import argparse
import asyncio
import os
import signal
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from blog_builder.core import BuildConfig, SiteBuilder, SiteConfig
from blog_builder.exceptions import ConfigError, OutputWriteError
from blog_builder.models import BuildReport
from blog_builder.storage import LocalBackend, ManifestStorage, MockStorage
from blog_builder.utils import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse argumentos de linha de comando."""
    parser = argparse.ArgumentParser(
        description="Gerador estático do blog: Markdown + front matter → HTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exemplos de uso:
  # Build padrão (content/ → public/)
  blog-builder

  # Diretórios explícitos e mais workers
  blog-builder site/content site/public --max-workers 16

  # Simular o build sem gravar nada
  blog-builder --dry-run --log-level DEBUG

  # Estatísticas do último build
  blog-builder --show-stats
        """,
    )

    parser.add_argument(
        "content_dir",
        nargs="?",
        type=Path,
        default=os.getenv(BuildConfig.ENV_CONTENT_DIR, str(BuildConfig.DEFAULT_CONTENT_DIR)),
        help="Diretório com os arquivos Markdown (padrão: content ou $BLOG_CONTENT_DIR)",
    )
    parser.add_argument(
        "output_dir",
        nargs="?",
        type=Path,
        default=os.getenv(BuildConfig.ENV_OUTPUT_DIR, str(BuildConfig.DEFAULT_OUTPUT_DIR)),
        help="Diretório de saída (padrão: public ou $BLOG_OUTPUT_DIR)",
    )

    # Grupo de configuração
    config_group = parser.add_argument_group("Configurações do Build")
    config_group.add_argument(
        "--config",
        type=Path,
        help="Arquivo config.toml do site (padrão: config.toml ao lado do conteúdo)",
    )
    config_group.add_argument(
        "--max-workers",
        type=int,
        default=os.getenv(BuildConfig.ENV_MAX_WORKERS, str(BuildConfig.MAX_WORKERS)),
        help="Número máximo de documentos processados em paralelo (padrão: 8 ou $BLOG_MAX_WORKERS)",
    )
    config_group.add_argument(
        "--base-url",
        help="Sobrescreve a URL base do site",
    )
    config_group.add_argument(
        "--no-manifest",
        action="store_true",
        help="Não gravar o manifesto Parquet do build",
    )

    # Grupo de logging
    log_group = parser.add_argument_group("Configurações de Log")
    log_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Nível de logging (padrão: INFO)",
    )
    log_group.add_argument(
        "--log-file", type=Path, help="Arquivo para salvar logs (opcional)"
    )

    # Grupo de utilitários
    util_group = parser.add_argument_group("Utilitários")
    util_group.add_argument(
        "--show-stats",
        action="store_true",
        help="Mostrar estatísticas do último build e sair",
    )
    util_group.add_argument(
        "--dry-run", action="store_true", help="Simular build sem gravar arquivos"
    )

    return parser.parse_args(argv)


def load_site_config(args: argparse.Namespace) -> SiteConfig:
    """Carrega o config.toml indicado ou o que estiver ao lado do conteúdo."""
    path = args.config
    if path is None:
        candidate = args.content_dir.parent / BuildConfig.CONFIG_FILENAME
        path = candidate if candidate.is_file() else None

    site = SiteConfig.from_toml(path) if path else SiteConfig()
    if args.base_url:
        site.base_url = args.base_url
    return site


def create_config(args: argparse.Namespace) -> BuildConfig:
    return BuildConfig(
        content_dir=args.content_dir,
        output_dir=args.output_dir,
        max_workers=args.max_workers,
        site=load_site_config(args),
        write_manifest=not args.no_manifest,
    )


def display_config_summary(args: argparse.Namespace, config: BuildConfig) -> None:
    """Exibe resumo da configuração usando Rich."""
    table = Table(title="⚙️  Configuração do Build", show_header=False)
    table.add_column("Parâmetro", style="cyan", width=25)
    table.add_column("Valor", style="green")

    table.add_row("📝 Site", config.site.title)
    table.add_row("🌐 URL base", config.site.base_url)

    table.add_row("", "")
    table.add_row("📂 Conteúdo", str(config.content_dir))
    output = "DRY-RUN (memória)" if args.dry_run else str(config.output_dir)
    table.add_row("💾 Saída", output)

    table.add_row("", "")
    table.add_row("⚡ Workers", str(config.max_workers))
    table.add_row("📄 Por página", str(config.site.paginate))
    threshold = config.site.toc_reading_time_threshold
    table.add_row("📑 Sumário automático", f"> {threshold} min" if threshold is not None else "❌ Desabilitado")

    console.print(table)
    console.print()


def display_results(report: BuildReport) -> None:
    """Exibe resultados do build usando Rich."""
    border = "green" if not report.failures else "yellow"
    panel = Panel.fit(
        f"""
[bold green]✅ BUILD CONCLUÍDO[/bold green]

[cyan]Documentos:[/cyan]
  • Publicados: [bold]{report.total_published}[/bold]
  • Rascunhos excluídos: [bold]{report.total_drafts}[/bold]
  • Ignorados por erro: [bold]{report.total_skipped}[/bold]
  • Arquivos gravados: [bold]{len(report.written)}[/bold]

[cyan]Performance:[/cyan]
  • Tempo total: [bold]{report.execution_time:.2f}s[/bold]
        """,
        title="📊 Resultados",
        border_style=border,
    )
    console.print(panel)

    if report.failures:
        table = Table(title="❌ Documentos ignorados", show_header=True)
        table.add_column("Slug", style="cyan")
        table.add_column("Erro", style="red")
        table.add_column("Detalhe")
        for failure in report.failures:
            table.add_row(failure.slug, failure.error_type, failure.error.message)
        console.print(table)


def show_manifest_stats(output_dir: Path) -> None:
    """Exibe estatísticas do manifesto do último build."""
    console.print("\n[bold cyan]📊 Estatísticas do último build[/bold cyan]\n")

    stats = ManifestStorage(LocalBackend(output_dir)).get_stats()
    if not stats:
        console.print("[yellow]⚠️  Nenhum manifesto encontrado[/yellow]")
        return

    table = Table(show_header=False)
    table.add_column("Métrica", style="cyan")
    table.add_column("Valor", style="green")

    table.add_row("Backend", stats.get("backend", "N/A"))
    table.add_row("Documentos", str(stats.get("total", 0)))
    table.add_row("Publicados", str(stats.get("published", 0)))
    table.add_row("Rascunhos", str(stats.get("drafts", 0)))
    table.add_row("Com erro", str(stats.get("failed", 0)))
    table.add_row("Palavras publicadas", f"{stats.get('words', 0):,}")
    table.add_row("Último build", str(stats.get("built_at", "N/A")))

    top_tags = stats.get("top_tags")
    if top_tags is not None and top_tags.height:
        tags = ", ".join(f"{row['tag']} ({row['documents']})" for row in top_tags.to_dicts())
        table.add_row("Tags mais usadas", tags)

    console.print(table)
    console.print()


def install_signal_handlers(builder: SiteBuilder) -> None:
    """SIGINT/SIGTERM interrompem o início de novos documentos."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, builder.request_stop)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"Sinal {sig.name} não suportado neste loop")


async def cli(argv: list[str] | None = None) -> BuildReport | None:
    """Função principal."""
    args = parse_arguments(argv)

    # Configura logging
    setup_logging(level=args.log_level, log_file=args.log_file)

    # Banner
    console.print(
        Panel.fit(
            "[bold blue]Blog Builder[/bold blue]\n"
            "[dim]Markdown com front matter e shortcodes → site estático[/dim]",
            border_style="blue",
        )
    )
    console.print()

    if args.show_stats:
        show_manifest_stats(args.output_dir)
        return None

    try:
        config = create_config(args)
    except ConfigError as e:
        logger.error(f"❌ Configuração inválida: {e}")
        sys.exit(1)

    display_config_summary(args, config)

    if args.dry_run:
        console.print("[yellow]⚠️  Modo DRY-RUN: arquivos não serão gravados[/yellow]\n")

    try:
        storage = MockStorage() if args.dry_run else LocalBackend(config.output_dir)
        builder = SiteBuilder(config=config, storage=storage)
        install_signal_handlers(builder)

        console.print("[bold green]🚀 Iniciando build...[/bold green]\n")
        report = await builder.run()

    except OutputWriteError as e:
        logger.error(f"❌ Falha ao gravar a saída: {e}")
        console.print(f"\n[bold red]❌ Erro de escrita: {e}[/bold red]")
        sys.exit(1)
    except ConfigError as e:
        logger.error(f"❌ Configuração inválida: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"❌ Erro durante execução: {e}")
        console.print(f"\n[bold red]❌ Erro: {e}[/bold red]")
        sys.exit(1)

    display_results(report)

    if not args.dry_run and config.write_manifest:
        console.print(
            "\n[dim]💡 Use --show-stats para ver estatísticas do último build[/dim]"
        )
    return report


def main():
    asyncio.run(cli())


if __name__ == "__main__":
    main()
