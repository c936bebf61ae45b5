"""Backend de armazenamento em disco local com escrita atômica."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Iterator

import pyarrow as pa
import pyarrow.parquet as pq

from blog_builder.exceptions import OutputWriteError
from blog_builder.storage.base import StorageBackend
from blog_builder.utils import get_logger

logger = get_logger(__name__)


PARQUET_COMPRESSION = "zstd"


class LocalBackend(StorageBackend):
    """
    Grava arquivos sob ``base_path``.

    Cada escrita vai para um arquivo temporário no diretório de destino e só
    substitui o alvo (``os.replace``) depois de flush + fsync; em qualquer
    falha o temporário é removido e nenhum arquivo parcial fica visível.
    """

    def __init__(self, base_path: Path | str):
        self.base_path = Path(base_path)
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputWriteError(self.base_path, e) from e
        logger.debug(f"LocalBackend iniciado em {self.base_path}")

    def __repr__(self) -> str:
        return f"<LocalBackend path={self.base_path}>"

    def _resolve(self, path: str) -> Path:
        target = (self.base_path / path).resolve()
        root = self.base_path.resolve()
        if target != root and root not in target.parents:
            raise OutputWriteError(path, "caminho fora do diretório de saída")
        return target

    @contextlib.contextmanager
    def atomic_open(self, path: str) -> Iterator[BinaryIO]:
        """Abre um handle binário cujo conteúdo só aparece no destino ao final."""
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as handle:
                yield handle
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                os.unlink(tmp_name)
            raise

    def write_bytes(
        self, path: str, data: bytes, metadata: dict[str, Any] | None = None
    ) -> str:
        try:
            with self.atomic_open(path) as handle:
                handle.write(data)
        except OutputWriteError:
            raise
        except OSError as e:
            raise OutputWriteError(path, e) from e

        logger.debug(f"Gravado {path} ({len(data)} bytes)")
        return self.get_uri(path)

    def read_bytes(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def exists(self, path: str) -> bool:
        return self._resolve(path).exists()

    def write_parquet(self, path: str, table: pa.Table, **kwargs: Any) -> str:
        sink = pa.BufferOutputStream()
        pq.write_table(
            table, sink, compression=kwargs.pop("compression", PARQUET_COMPRESSION), **kwargs
        )
        return self.write_bytes(path, sink.getvalue().to_pybytes())

    def read_parquet(self, path: str, columns: list[str] | None = None) -> pa.Table:
        return pq.read_table(str(self._resolve(path)), columns=columns)

    def list_files(self, prefix: str, suffix: str | None = None) -> list[str]:
        root = self.base_path / prefix
        if not root.exists():
            return []
        files = [
            str(p.relative_to(self.base_path))
            for p in root.rglob("*")
            if p.is_file() and (suffix is None or p.name.endswith(suffix))
        ]
        return sorted(files)

    def get_uri(self, path: str) -> str:
        return str(self._resolve(path))
