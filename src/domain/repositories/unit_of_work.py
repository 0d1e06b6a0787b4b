"""Unit of Work protocol."""

from typing import Protocol

from domain.repositories.carpool_repository import ICarpoolRepository
from domain.repositories.event_repository import IEventRepository
from domain.repositories.message_repository import IMessageRepository
from domain.repositories.profile_repository import IProfileRepository
from domain.repositories.rating_repository import IRatingRepository


class IUnitOfWork(Protocol):
    """Unit of Work interface for managing transactions."""

    profiles: IProfileRepository
    events: IEventRepository
    carpools: ICarpoolRepository
    ratings: IRatingRepository
    messages: IMessageRepository

    async def commit(self) -> None:
        """Commit the current transaction."""
        ...

    async def rollback(self) -> None:
        """Rollback the current transaction."""
        ...

    async def __aenter__(self) -> "IUnitOfWork":
        """Enter the context manager."""
        ...

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Exit the context manager."""
        ...
