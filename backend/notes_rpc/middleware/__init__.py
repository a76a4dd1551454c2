# Middleware package init
"""
Notes RPC Backend — Middleware Package
========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS headers / preflight] → [Request ID] → [Logging] → Route Handler

    1. CORS first: preflight is answered before any other work, and the
       headers land on every response produced further in
    2. Request ID: correlation ID for logging
    3. Logging: method, path, RPC operation, status and duration
"""
