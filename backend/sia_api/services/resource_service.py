"""
SIA API: Generic Resource Service
=================================

What:  The one CRUD implementation behind /api/users, /api/roles,
       /api/permissions, /api/orders and /api/transaction.
How:   Parameterised by ORM model, response schema and display name. Each
       operation is a single repository call plus the mapping of "row
       missing" to NotFoundError. Request bodies arrive already validated
       by their pydantic create schema.

Semantics:
    create   → stored record (409 on a duplicate natural key)
    list     → every record, oldest first, unfiltered
    get      → one record by `id`; a malformed id is the same as a missing one
    replace  → full replacement of the writable fields, `updatedAt` bumped
    delete   → {"message": "<Name> deleted successfully"}

No referential-integrity or role checks are applied to any resource.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from sia_api.exceptions import NotFoundError
from sia_api.repositories.base import ModelT, Repository
from sia_api.schemas.common import MessageResponse
from sia_api.security import PasswordHasher

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class ResourceService(Generic[ModelT, ResponseT]):
    def __init__(
        self,
        repository: Repository[ModelT],
        response_schema: Type[ResponseT],
        display_name: str,
    ):
        self.repository = repository
        self.response_schema = response_schema
        self.display_name = display_name

    async def create(self, payload: BaseModel) -> ResponseT:
        record = await self.repository.add(**await self._values(payload))
        logger.info("Created %s %s", self.display_name, record.id)
        return self._to_response(record)

    async def list(self) -> List[ResponseT]:
        records = await self.repository.list_all()
        return [self._to_response(r) for r in records]

    async def get(self, record_id: str) -> ResponseT:
        return self._to_response(await self._require(record_id))

    async def replace(self, record_id: str, payload: BaseModel) -> ResponseT:
        record = await self._require(record_id)
        values = await self._values(payload)
        values["updated_at"] = datetime.now(timezone.utc)
        record = await self.repository.update(record, **values)
        logger.info("Replaced %s %s", self.display_name, record.id)
        return self._to_response(record)

    async def delete(self, record_id: str) -> MessageResponse:
        record = await self._require(record_id)
        await self.repository.delete(record)
        logger.info("Deleted %s %s", self.display_name, record_id)
        return MessageResponse(message=f"{self.display_name} deleted successfully")

    async def _values(self, payload: BaseModel) -> Dict[str, Any]:
        """Column values for a validated payload, keyed by attribute name."""
        return payload.model_dump()

    async def _require(self, record_id: str) -> ModelT:
        parsed = _parse_id(record_id)
        record = await self.repository.get(parsed) if parsed is not None else None
        if record is None:
            raise NotFoundError(resource=self.display_name, resource_id=record_id)
        return record

    def _to_response(self, record: ModelT) -> ResponseT:
        return self.response_schema.model_validate(record)


class AccountResourceService(ResourceService):
    """
    /api/users variant: the submitted `password` is replaced by its bcrypt
    digest before storage. Responses never carry either.
    """

    def __init__(
        self,
        repository: Repository,
        response_schema: Type[BaseModel],
        display_name: str,
        hasher: PasswordHasher,
    ):
        super().__init__(repository, response_schema, display_name)
        self.hasher = hasher

    async def _values(self, payload: BaseModel) -> Dict[str, Any]:
        values = payload.model_dump()
        values["password_hash"] = await self.hasher.hash_async(values.pop("password"))
        return values


def _parse_id(record_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None
