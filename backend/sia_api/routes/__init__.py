"""
SIA API: Routes Package
=======================

Route Inventory:
    - auth.py:       POST /api/auth/register
                     POST /api/auth/login
                     POST /api/auth/refresh-token
    - resources.py:  POST/GET /api/{users,roles,permissions,orders,transaction}
                     GET/PUT/DELETE /api/{...}/{id}
    - health.py:     GET /health

Routes stay thin: pull the validated body, call a service, return its
result. Status codes other than 200 are declared on the decorator.
"""
