"""Unit of work interface."""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):
    """
    Transaction boundary for one use case.
    Repositories share the unit of work's transaction; nothing they write
    is visible to others until ``commit``.
    """

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass
