"""Backend em memória para dry-run e testes."""

from __future__ import annotations

from typing import Any

import pyarrow as pa
import pyarrow.parquet as pq

from blog_builder.storage.base import StorageBackend
from blog_builder.utils import get_logger

logger = get_logger(__name__)


class MockStorage(StorageBackend):
    """Guarda os arquivos em um dicionário; nada é escrito em disco."""

    def __init__(self):
        self.files: dict[str, bytes] = {}

    def __repr__(self) -> str:
        return f"<MockStorage files={len(self.files)}>"

    def write_bytes(
        self, path: str, data: bytes, metadata: dict[str, Any] | None = None
    ) -> str:
        self.files[path] = bytes(data)
        return self.get_uri(path)

    def read_bytes(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def read_text(self, path: str) -> str:
        return self.read_bytes(path).decode("utf-8")

    def exists(self, path: str) -> bool:
        return path in self.files

    def write_parquet(self, path: str, table: pa.Table, **kwargs: Any) -> str:
        sink = pa.BufferOutputStream()
        pq.write_table(table, sink, **kwargs)
        return self.write_bytes(path, sink.getvalue().to_pybytes())

    def read_parquet(self, path: str, columns: list[str] | None = None) -> pa.Table:
        return pq.read_table(pa.BufferReader(self.read_bytes(path)), columns=columns)

    def list_files(self, prefix: str, suffix: str | None = None) -> list[str]:
        return sorted(
            path
            for path in self.files
            if path.startswith(prefix) and (suffix is None or path.endswith(suffix))
        )

    def get_uri(self, path: str) -> str:
        return f"memory://{path}"
