"""Storage access layer."""

from sia_api.repositories.base import Repository

__all__ = ["Repository"]
