# Middleware package init
"""
Daylog Backend — Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id for logs and error bodies
    2. Logging: method, path, status and duration under that id
    3. GZip / CORS: FastAPI's built-in middleware

    Responses travel the chain in reverse, so the request id header is set
    on every response and the logged duration covers the whole handler.
"""
