"""ORM models. Importing this package registers every table with `Base.metadata`."""

from sia_api.models.account import Account
from sia_api.models.order import Order
from sia_api.models.permission import Permission
from sia_api.models.revoked_token import RevokedToken
from sia_api.models.role import Role
from sia_api.models.transaction import Transaction

__all__ = [
    "Account",
    "Order",
    "Permission",
    "RevokedToken",
    "Role",
    "Transaction",
]
