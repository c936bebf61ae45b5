"""Utilitários de texto: slugs, contagem de palavras e tempo de leitura."""

import hashlib
import math
import re
from unicodedata import normalize

WORDS_PER_MINUTE = 200

_WORD_RE = re.compile(r"\b\w+\b", re.UNICODE)


def slugify(text: str, max_len: int = 80) -> str:
    """
    Converte texto em slug seguro para URLs.

    Args:
        text: Texto de entrada
        max_len: Tamanho máximo do slug

    Returns:
        Slug em minúsculas, apenas [a-z0-9-]
    """
    normalized = normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")
    return slug


def term_key(name: str) -> str:
    """
    Chave de URL de um termo de taxonomia ou série.

    Termos sem nenhum caractere ASCII (ex.: "日本語") usam um hash curto do
    nome; termos vazios retornam "".
    """
    key = slugify(name)
    if key or not name.strip():
        return key
    return hashlib.sha256(name.strip().encode("utf-8")).hexdigest()[:12]


def count_words(text: str) -> int:
    return len(_WORD_RE.findall(text))


def reading_time(word_count: int, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Tempo de leitura em minutos (mínimo 1)."""
    return max(1, math.ceil(word_count / words_per_minute))


def truncate_words(text: str, limit: int = 280) -> str:
    """Trunca texto no limite de caracteres sem cortar palavras."""
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    cut = text[:limit].rsplit(" ", 1)[0]
    return cut.rstrip(",.;:") + "…"
