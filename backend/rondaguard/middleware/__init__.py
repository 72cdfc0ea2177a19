"""
RondaGuard Backend - Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    - Request ID first, so every log line of the request carries it
    - Access log records status and duration once the response is built
"""
