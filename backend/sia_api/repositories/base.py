"""
SIA API: Generic Repository
===========================

What:  The single storage seam for every table: add, list, get, get_by,
       update, delete.
How:   Wraps one `AsyncSession`. Each call is bounded by
       `asyncio.wait_for(..., timeout)` and flushed immediately, so
       constraint violations surface inside the call that caused them
       (the commit itself happens once per request in `get_db_session`).
Who:   ResourceService (CRUD endpoints) and AuthService (accounts, revoked
       refresh tokens).

Error translation:
    IntegrityError      → ConflictError        (409, duplicate natural key)
    asyncio timeout     → StorageTimeoutError  (503)
    other SQLAlchemy    → DatabaseError        (500, generic message)

Missing rows are returned as None, never raised; the service layer decides
whether absence means 404.
"""

import asyncio
import logging
from typing import Any, Awaitable, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sia_api.database import Base
from sia_api.exceptions import ConflictError, DatabaseError, StorageTimeoutError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
T = TypeVar("T")


class Repository(Generic[ModelT]):
    """
    CRUD access to one ORM model.

    Args:
        session: Request-scoped async session
        model: ORM class this repository manages
        timeout: Seconds allowed per storage call
        resource_name: Display name used in conflict messages ("Role")
    """

    def __init__(
        self,
        session: AsyncSession,
        model: Type[ModelT],
        timeout: float = 5.0,
        resource_name: Optional[str] = None,
    ):
        self.session = session
        self.model = model
        self.timeout = timeout
        self.resource_name = resource_name or model.__name__

    async def add(self, **values: Any) -> ModelT:
        record = self.model(**values)

        async def _add() -> ModelT:
            self.session.add(record)
            await self.session.flush()
            return record

        return await self._run("add", _add())

    async def list_all(self) -> List[ModelT]:
        """All rows, oldest first when the table has `created_at`."""
        query = select(self.model)
        created_at = getattr(self.model, "created_at", None)
        if created_at is not None:
            query = query.order_by(created_at)

        async def _list() -> List[ModelT]:
            result = await self.session.execute(query)
            return list(result.scalars().all())

        return await self._run("list", _list())

    async def get(self, record_id: Any) -> Optional[ModelT]:
        return await self._run("get", self.session.get(self.model, record_id))

    async def get_by(self, **filters: Any) -> Optional[ModelT]:
        """First row whose columns equal every keyword filter, or None."""
        query = select(self.model).filter_by(**filters).limit(1)

        async def _get_by() -> Optional[ModelT]:
            result = await self.session.execute(query)
            return result.scalar_one_or_none()

        return await self._run("get_by", _get_by())

    async def update(self, record: ModelT, **values: Any) -> ModelT:
        for key, value in values.items():
            setattr(record, key, value)

        async def _update() -> ModelT:
            await self.session.flush()
            return record

        return await self._run("update", _update())

    async def delete(self, record: ModelT) -> None:
        async def _delete() -> None:
            await self.session.delete(record)
            await self.session.flush()

        await self._run("delete", _delete())

    async def _run(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(
                "Storage %s on %s timed out after %.1fs",
                operation, self.model.__tablename__, self.timeout,
            )
            raise StorageTimeoutError(
                timeout=self.timeout,
                context={"operation": operation, "table": self.model.__tablename__},
            ) from e
        except IntegrityError as e:
            logger.info("Conflict on %s %s: %s", self.model.__tablename__, operation, e.orig)
            raise ConflictError(
                message=f"{self.resource_name} already exists",
                context={"table": self.model.__tablename__},
            ) from e
        except SQLAlchemyError as e:
            logger.error(
                "Storage %s on %s failed: %s",
                operation, self.model.__tablename__, e, exc_info=True,
            )
            raise DatabaseError(
                context={"operation": operation, "error_type": type(e).__name__},
            ) from e
