"""FastAPI dependency injection helpers."""

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from ravito.config import settings
from ravito.infrastructure.database import async_session_factory
from ravito.infrastructure.redis_client import get_redis
from ravito.services.orders import OrderService
from ravito.services.selection import SupplierSelector
from ravito.services.suppliers import SupplierService


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_selector(db: AsyncSession = Depends(get_db)) -> SupplierSelector:
    return SupplierSelector.for_session(db, settings)


def get_order_service(
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
) -> OrderService:
    return OrderService.for_session(db, redis, settings)


def get_supplier_service(db: AsyncSession = Depends(get_db)) -> SupplierService:
    return SupplierService.for_session(db, settings)
