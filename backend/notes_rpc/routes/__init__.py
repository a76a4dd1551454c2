# Routes package init
"""
Notes RPC Backend — API Routes Package
========================================

What:  HTTP-facing layer: routing, wire decoding and response envelopes.

Module Inventory:
    - rpc.py:       /api/trpc/<operation> routes and the /api 404 catch-all
    - decoder.py:   request → {"input": ...} payload (pure function)
    - envelope.py:  success / error envelopes, single or batched
    - health.py:    GET /health

Design Principle:
    Routes stay THIN: decode, call the NoteService handler, wrap the result.
    Business rules live in services.
"""
