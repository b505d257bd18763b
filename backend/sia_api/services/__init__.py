"""
SIA API: Services Package
=========================

What:  Business logic between the HTTP routes and the storage layer.

Service Inventory:
    - auth_service.py:      register, login, refresh-token
    - resource_service.py:  generic CRUD for users, roles, permissions,
                            orders and transactions
"""
