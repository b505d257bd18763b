"""
SIA API: Package Initializer
============================

User-management HTTP API: accounts, roles, permissions, orders and
transactions, behind JWT bearer authentication.

Layers:

    ┌─────────────────────────────────────┐
    │   Middleware (guard, ids, logging)  │  ← cross-cutting, per request
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (auth, generic resources) │  ← business rules
    ├─────────────────────────────────────┤
    │   Security (bcrypt, signed tokens)  │
    ├─────────────────────────────────────┤
    │  Repository + Models & Schemas      │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
