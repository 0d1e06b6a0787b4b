"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from fastapi import Depends
from starlette.requests import HTTPConnection

from domain.services.carpool_service import CarpoolService
from domain.services.chat_service import ChatService
from domain.services.event_service import EventService
from domain.services.membership_service import MembershipService
from domain.services.profile_service import ProfileService
from domain.services.rating_service import RatingService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.realtime.broker import IRealtimeBroker


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def get_realtime_broker(conn: HTTPConnection) -> IRealtimeBroker:
    """Get the broker chosen when the app was created."""
    return conn.app.state.realtime_broker


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(get_uow_factory())


@lru_cache
def get_event_service() -> EventService:
    """Get Event service instance."""
    return EventService(get_uow_factory())


@lru_cache
def get_membership_service() -> MembershipService:
    """Get Membership service instance."""
    return MembershipService(get_uow_factory())


@lru_cache
def get_carpool_service() -> CarpoolService:
    """Get Carpool service instance."""
    return CarpoolService(get_uow_factory())


@lru_cache
def get_rating_service() -> RatingService:
    """Get Rating service instance."""
    return RatingService(get_uow_factory())


def get_chat_service(
    broker: IRealtimeBroker = Depends(get_realtime_broker),
) -> ChatService:
    """Get a Chat service bound to this app's broker."""
    return ChatService(get_uow_factory(), broker)
