"""
SIA API: Resource Routes
========================

What:  CRUD endpoints for users, roles, permissions, orders and
       transactions, all produced by one router factory.
How:   `build_resource_router()` closes over a resource's model and schemas
       and registers the five standard endpoints. Each request gets a
       ResourceService bound to its own DB session.

Endpoints per resource (`<r>` = users | roles | permissions | orders | transaction):
    POST   /api/<r>        → 201 created record
    GET    /api/<r>        → 200 list of records
    GET    /api/<r>/{id}   → 200 record, 404 if absent
    PUT    /api/<r>/{id}   → 200 replaced record, 404 if absent
    DELETE /api/<r>/{id}   → 200 {"message": "<Name> deleted successfully"}

Every path here sits under /api/ and therefore behind the access guard.
"""

import logging
from typing import Callable, List, Type

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from sia_api.database import Base, get_db_session
from sia_api.models import Account, Order, Permission, Role, Transaction
from sia_api.repositories import Repository
from sia_api.schemas.account import AccountCreate, AccountResponse
from sia_api.schemas.common import ErrorResponse, MessageResponse
from sia_api.schemas.order import OrderCreate, OrderResponse
from sia_api.schemas.permission import PermissionCreate, PermissionResponse
from sia_api.schemas.role import RoleCreate, RoleResponse
from sia_api.schemas.transaction import TransactionCreate, TransactionResponse
from sia_api.services.resource_service import AccountResourceService, ResourceService

logger = logging.getLogger(__name__)

ServiceFactory = Callable[[Repository, Type[BaseModel], str, Request], ResourceService]


def _plain_service(
    repository: Repository, response_schema: Type[BaseModel], display_name: str, request: Request
) -> ResourceService:
    return ResourceService(repository, response_schema, display_name)


def _account_service(
    repository: Repository, response_schema: Type[BaseModel], display_name: str, request: Request
) -> ResourceService:
    return AccountResourceService(
        repository, response_schema, display_name, hasher=request.app.state.password_hasher
    )


_errors = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or invalid access token", "model": ErrorResponse},
}
_not_found = {404: {"description": "No record with this id", "model": ErrorResponse}}
_conflict = {409: {"description": "Duplicate natural key", "model": ErrorResponse}}


def build_resource_router(
    path: str,
    model: Type[Base],
    create_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
    display_name: str,
    service_factory: ServiceFactory = _plain_service,
) -> APIRouter:
    """Router exposing the five CRUD endpoints for one resource at /api/<path>."""
    router = APIRouter(prefix=f"/api/{path}", tags=[display_name])

    def get_service(
        request: Request,
        session: AsyncSession = Depends(get_db_session),
    ) -> ResourceService:
        settings = request.app.state.settings
        repository = Repository(
            session, model, timeout=settings.db_timeout_seconds, resource_name=display_name
        )
        return service_factory(repository, response_schema, display_name, request)

    @router.post(
        "",
        status_code=201,
        response_model=response_schema,
        responses={**_errors, **_conflict},
        summary=f"Create a {display_name.lower()}",
    )
    async def create_record(
        payload: create_schema,
        service: ResourceService = Depends(get_service),
    ):
        return await service.create(payload)

    @router.get(
        "",
        response_model=List[response_schema],
        responses=_errors,
        summary=f"List every {display_name.lower()}",
    )
    async def list_records(service: ResourceService = Depends(get_service)):
        return await service.list()

    @router.get(
        "/{record_id}",
        response_model=response_schema,
        responses={**_errors, **_not_found},
        summary=f"Get one {display_name.lower()}",
    )
    async def get_record(record_id: str, service: ResourceService = Depends(get_service)):
        return await service.get(record_id)

    @router.put(
        "/{record_id}",
        response_model=response_schema,
        responses={**_errors, **_not_found, **_conflict},
        summary=f"Replace a {display_name.lower()}",
    )
    async def replace_record(
        record_id: str,
        payload: create_schema,
        service: ResourceService = Depends(get_service),
    ):
        return await service.replace(record_id, payload)

    @router.delete(
        "/{record_id}",
        response_model=MessageResponse,
        responses={**_errors, **_not_found},
        summary=f"Delete a {display_name.lower()}",
    )
    async def delete_record(record_id: str, service: ResourceService = Depends(get_service)):
        return await service.delete(record_id)

    return router


def resource_routers() -> List[APIRouter]:
    return [
        build_resource_router(
            "users", Account, AccountCreate, AccountResponse, "User",
            service_factory=_account_service,
        ),
        build_resource_router("roles", Role, RoleCreate, RoleResponse, "Role"),
        build_resource_router(
            "permissions", Permission, PermissionCreate, PermissionResponse, "Permission"
        ),
        build_resource_router("orders", Order, OrderCreate, OrderResponse, "Order"),
        build_resource_router(
            "transaction", Transaction, TransactionCreate, TransactionResponse, "Transaction"
        ),
    ]
