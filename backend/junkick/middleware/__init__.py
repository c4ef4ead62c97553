# Middleware package init
"""
Junkick Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: rejected requests never reach a handler or the database
    2. Request ID: every later log line and error body carries the same ID
    3. Logging: sees the final status and duration
    4. GZip / CORS: Starlette built-ins
"""
