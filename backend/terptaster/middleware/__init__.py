# Middleware package init
"""
TerpTaster Backend - Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    1. Rate Limit first: abusive clients are rejected before any other work
    2. Request ID: correlation id for logs and error bodies
    3. Logging: one access line per request, tagged with the request id
"""
