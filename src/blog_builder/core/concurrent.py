"""Execução concorrente de tarefas bloqueantes com limitação via asyncio.Semaphore."""

import asyncio
from collections.abc import Callable
from typing import TypeVar

from ..utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class ConcurrentRunner:
    """
    Executa uma função bloqueante sobre vários itens em threads,
    com no máximo ``max_workers`` execuções simultâneas.

    Quando ``stop_event`` é sinalizado, itens ainda não iniciados não são
    executados e aparecem como None no resultado; execuções em andamento
    terminam normalmente.
    """

    def __init__(self, max_workers: int = 8, stop_event: asyncio.Event | None = None):
        """
        Args:
            max_workers: Número máximo de execuções simultâneas
            stop_event: Evento que interrompe o início de novas execuções
        """
        self.max_workers = max_workers
        self.semaphore = asyncio.Semaphore(max_workers)
        self.stop_event = stop_event or asyncio.Event()

    def __repr__(self) -> str:
        return f"<ConcurrentRunner workers={self.max_workers} stopped={self.stopped}>"

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def stop(self) -> None:
        """Sinaliza que nenhuma nova execução deve começar."""
        if not self.stopped:
            logger.warning("⚠️ Interrupção solicitada; aguardando tarefas em andamento")
        self.stop_event.set()

    async def run_all(
        self, items: list[T], func: Callable[[T], R]
    ) -> list[R | BaseException | None]:
        """
        Executa ``func`` para cada item respeitando o limite de concorrência.

        Args:
            items: Itens a processar
            func: Função bloqueante executada via ``asyncio.to_thread``

        Returns:
            Lista na mesma ordem dos itens: o resultado, a exceção levantada
            ou None para itens não iniciados por causa da interrupção
        """

        async def run_with_semaphore(item: T) -> R | None:
            async with self.semaphore:
                if self.stopped:
                    return None
                return await asyncio.to_thread(func, item)

        tasks = [run_with_semaphore(item) for item in items]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        failed = sum(1 for r in results if isinstance(r, BaseException))
        skipped = sum(1 for r in results if r is None)
        logger.debug(
            f"Concluídas {len(results) - failed - skipped}/{len(items)} tarefas "
            f"({failed} com erro, {skipped} não iniciadas)"
        )
        return results
