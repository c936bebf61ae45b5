"""Configuração centralizada de logging."""

import logging
import logging.config
import sys
from pathlib import Path

PACKAGE_LOGGER = "blog_builder"

# Bibliotecas usadas na renderização que só interessam em caso de problema
QUIET_LOGGERS = ("markdown_it", "asyncio")


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    format: str | None = None,
) -> None:
    """
    Configura o logging do build.

    Mensagens do pacote vão para stderr (o stdout fica com os painéis do Rich)
    e, opcionalmente, para um arquivo rotativo. Loggers de bibliotecas de
    terceiros ficam em WARNING mesmo com ``level=DEBUG``.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Arquivo para salvar logs (None para apenas console)
        format: Formato personalizado dos logs
    """
    if format is None:
        format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "standard",
                "stream": sys.stderr,
            },
        },
        "loggers": {
            PACKAGE_LOGGER: {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
            **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
    }

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "standard",
            "filename": str(log_path),
            "maxBytes": 10_485_760,  # 10MB
            "backupCount": 5,
            "encoding": "utf-8",
        }

        config["loggers"][PACKAGE_LOGGER]["handlers"].append("file")
        config["root"]["handlers"].append("file")

    logging.config.dictConfig(config)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.debug(f"Logging configurado (level: {level})")


def get_logger(name: str) -> logging.Logger:
    """Retorna logger com nome qualificado (geralmente __name__)."""
    return logging.getLogger(name)


class DocumentLogger(logging.LoggerAdapter):
    """Prefixa as mensagens com o slug do documento em processamento."""

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {}).update(self.extra)
        return f"[{self.extra['slug']}] {msg}", kwargs


def get_document_logger(logger: logging.Logger, slug: str) -> DocumentLogger:
    """Adapter de ``logger`` para um documento (slug também em ``record.slug``)."""
    return DocumentLogger(logger, {"slug": slug})
