"""
RondaGuard Backend - API Routes Package
=======================================

What:  HTTP route handlers; thin wrappers over the services.

Route Inventory:
    - auth.py:       POST /api/login
    - users.py:      GET/POST /api/users, PUT /api/users/{id}/status
    - templates.py:  GET/POST /api/templates, GET/DELETE /api/templates/{id}
    - tasks.py:      GET/POST /api/tasks, GET/DELETE /api/tasks/{id}
    - rounds.py:     GET/POST /api/rounds, GET /api/rounds/{id}
    - settings.py:   GET/POST /api/settings
    - health.py:     GET /health

Routes extract path/query/body, call one service operation with the
Database taken from app state, and answer JSON. Errors propagate to the
global exception handlers in main.py.
"""
