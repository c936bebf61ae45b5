"""Utilitários para manipulação de datas."""

from datetime import date, datetime, time, timezone
from email.utils import format_datetime

from dateutil import parser as date_parser


def parse_date(value: str | date | datetime | None) -> datetime | None:
    """
    Converte um valor ISO-8601 do front matter em datetime com fuso.

    Datas sem horário viram meia-noite; valores sem fuso são tratados como UTC.

    Args:
        value: String ISO-8601, date, datetime ou None

    Returns:
        datetime com tzinfo ou None se value for None

    Raises:
        ValueError: Se a string não for ISO-8601 válida
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        parsed = date_parser.isoparse(value.strip())
    else:
        raise ValueError(f"Tipo de data não suportado: {type(value).__name__}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(date_obj: date | datetime | None, format: str = "%Y-%m-%d") -> str:
    """Formata objeto date/datetime para string (vazio se None)."""
    if date_obj is None:
        return ""
    return date_obj.strftime(format)


def format_rfc822(date_obj: datetime) -> str:
    """Formata datetime no padrão RFC 822 exigido pelo RSS 2.0."""
    return format_datetime(date_obj)


def to_isoformat(date_obj: datetime | None) -> str | None:
    if date_obj is None:
        return None
    return date_obj.isoformat()
