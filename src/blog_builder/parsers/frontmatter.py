"""Parser para o front matter dos documentos (YAML ou TOML)."""

import re
import tomllib
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import MetadataError
from ..models import DocumentMetadata
from ..utils import get_logger, parse_date

logger = get_logger(__name__)


RECOGNIZED_KEYS = (
    "title",
    "date",
    "draft",
    "tags",
    "categories",
    "series",
    "series_weight",
    "summary",
)

_TRUE_STRINGS = ("true", "1", "yes", "on")
_FALSE_STRINGS = ("false", "0", "no", "off", "")
_TOML_LINE_RE = re.compile(r"at line (\d+)")

# Limites de um inteiro de 64 bits (coluna do manifesto)
WEIGHT_MIN, WEIGHT_MAX = -(2**63), 2**63 - 1


class FrontMatterParser:
    """Separa metadados e corpo e decodifica os metadados em DocumentMetadata."""

    YAML_DELIMITER = "---"
    TOML_DELIMITER = "+++"

    @classmethod
    def split(
        cls, text: str, source: str | Path | None = None
    ) -> tuple[str | None, str | None, str]:
        """
        Separa o bloco de metadados do corpo.

        Args:
            text: Conteúdo completo do arquivo
            source: Identificador do arquivo (para mensagens de erro)

        Returns:
            Tupla (bloco bruto ou None, delimitador ou None, corpo)

        Raises:
            MetadataError: Se o delimitador de abertura não for fechado
        """
        text = text.lstrip("\ufeff")
        lines = text.splitlines(keepends=True)

        if not lines:
            return None, None, text

        delimiter = lines[0].rstrip()
        if delimiter not in (cls.YAML_DELIMITER, cls.TOML_DELIMITER):
            return None, None, text

        for index in range(1, len(lines)):
            if lines[index].rstrip() == delimiter:
                block = "".join(lines[1:index])
                body = "".join(lines[index + 1 :])
                return block, delimiter, body

        raise MetadataError(
            f"front matter não terminado (delimitador '{delimiter}' sem fechamento)",
            source=source,
            line=1,
        )

    @classmethod
    def load_mapping(
        cls, block: str, delimiter: str, source: str | Path | None = None
    ) -> dict[str, Any]:
        """Decodifica o bloco bruto em um dicionário."""
        if delimiter == cls.TOML_DELIMITER:
            try:
                return tomllib.loads(block)
            except tomllib.TOMLDecodeError as e:
                match = _TOML_LINE_RE.search(str(e))
                line = int(match.group(1)) + 1 if match else None
                raise MetadataError(f"TOML inválido: {e}", source=source, line=line)

        try:
            data = yaml.safe_load(block)
        except yaml.YAMLError as e:
            line = None
            mark = getattr(e, "problem_mark", None)
            if mark is not None:
                # +1 pela base zero e +1 pela linha do delimitador
                line = mark.line + 2
            problem = getattr(e, "problem", None) or str(e)
            raise MetadataError(f"YAML inválido: {problem}", source=source, line=line)

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise MetadataError(
                f"front matter deve ser um mapeamento, não {type(data).__name__}",
                source=source,
                line=2,
            )
        return data

    @classmethod
    def parse(
        cls, text: str, source: str | Path | None = None
    ) -> tuple[DocumentMetadata, str]:
        """
        Extrai metadados tipados e corpo de um documento.

        Arquivos sem delimitador de abertura são tratados como corpo puro com
        metadados vazios.

        Args:
            text: Conteúdo completo do arquivo
            source: Identificador do arquivo (para mensagens de erro)

        Returns:
            Tupla (DocumentMetadata, corpo)

        Raises:
            MetadataError: Em delimitador não terminado, sintaxe inválida ou
                valores com tipo incorreto
        """
        block, delimiter, body = cls.split(text, source)
        if block is None:
            logger.debug(f"{source}: sem front matter, usando metadados vazios")
            return DocumentMetadata(), body

        mapping = cls.load_mapping(block, delimiter, source)
        metadata = cls.decode(mapping, source=source, block=block)
        return metadata, body

    @classmethod
    def decode(
        cls,
        mapping: dict[str, Any],
        source: str | Path | None = None,
        block: str = "",
    ) -> DocumentMetadata:
        """Converte o dicionário bruto em DocumentMetadata validado."""

        def fail(key: str, message: str) -> MetadataError:
            return MetadataError(
                f"'{key}': {message}", source=source, line=_key_line(block, key)
            )

        title = mapping.get("title")
        if title is None:
            title = ""
        elif isinstance(title, (dict, list)):
            raise fail("title", "esperado texto")
        else:
            title = str(title)

        try:
            date = parse_date(mapping.get("date"))
        except (ValueError, OverflowError) as e:
            raise fail("date", f"data ISO-8601 inválida ({e})")

        draft = mapping.get("draft", False)
        if draft is None:
            draft = False
        elif isinstance(draft, bool):
            pass
        elif isinstance(draft, str) and draft.strip().lower() in _TRUE_STRINGS:
            draft = True
        elif isinstance(draft, str) and draft.strip().lower() in _FALSE_STRINGS:
            draft = False
        elif isinstance(draft, int):
            draft = bool(draft)
        else:
            raise fail("draft", f"esperado booleano, recebido {draft!r}")

        tags = _string_list(mapping.get("tags"), "tags", fail)
        categories = _string_list(mapping.get("categories"), "categories", fail)

        series = mapping.get("series")
        if isinstance(series, list):
            if len(series) > 1:
                raise fail("series", "um documento pertence a no máximo uma série")
            series = series[0] if series else None
        if series is not None:
            if isinstance(series, (dict, list)):
                raise fail("series", "esperado texto")
            series = str(series)

        series_weight = mapping.get("series_weight")
        if series_weight is not None:
            if isinstance(series_weight, bool):
                raise fail("series_weight", "esperado inteiro")
            try:
                series_weight = int(series_weight)
            except (TypeError, ValueError):
                raise fail("series_weight", f"esperado inteiro, recebido {series_weight!r}")
            if not WEIGHT_MIN <= series_weight <= WEIGHT_MAX:
                raise fail("series_weight", f"fora do intervalo de 64 bits: {series_weight}")

        summary = mapping.get("summary")
        if summary is not None:
            summary = str(summary)

        extra = {k: v for k, v in mapping.items() if k not in RECOGNIZED_KEYS}

        return DocumentMetadata(
            title=title,
            date=date,
            draft=draft,
            tags=tags,
            categories=categories,
            series=series,
            series_weight=series_weight,
            summary=summary,
            extra=extra,
        )

    @staticmethod
    def to_mapping(metadata: DocumentMetadata) -> dict[str, Any]:
        """Converte DocumentMetadata de volta em dicionário serializável."""
        data: dict[str, Any] = {"title": metadata.title}
        if metadata.date is not None:
            data["date"] = metadata.date.isoformat()
        data["draft"] = metadata.draft
        if metadata.tags:
            data["tags"] = list(metadata.tags)
        if metadata.categories:
            data["categories"] = list(metadata.categories)
        if metadata.series is not None:
            data["series"] = metadata.series
        if metadata.series_weight is not None:
            data["series_weight"] = metadata.series_weight
        if metadata.summary is not None:
            data["summary"] = metadata.summary
        data.update(metadata.extra)
        return data

    @classmethod
    def serialize(cls, metadata: DocumentMetadata, body: str = "") -> str:
        """Re-serializa metadados (e corpo opcional) em um documento com front matter YAML."""
        dumped = yaml.safe_dump(
            cls.to_mapping(metadata),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return f"{cls.YAML_DELIMITER}\n{dumped}{cls.YAML_DELIMITER}\n{body}"


def _key_line(block: str, key: str) -> int | None:
    """Linha absoluta (no arquivo) em que a chave aparece no bloco."""
    pattern = re.compile(rf"^\s*[\"']?{re.escape(key)}[\"']?\s*[:=]")
    for index, line in enumerate(block.splitlines()):
        if pattern.match(line):
            return index + 2
    return None


def _string_list(value: Any, key: str, fail) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if not isinstance(value, list):
        raise fail(key, f"esperado lista de textos, recebido {type(value).__name__}")

    items = []
    for item in value:
        if isinstance(item, (dict, list)) or item is None:
            raise fail(key, f"item inválido {item!r}")
        text = str(item).strip()
        if text and text not in items:
            items.append(text)
    return items
