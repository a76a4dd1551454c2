"""
Notes RPC Backend — Application Package Initializer
====================================================

What: Marks the `notes_rpc` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn notes_rpc.main:app`) and by pytest.

Architecture Note:
    The backend is a thin RPC layer over a single table:

    ┌─────────────────────────────────────┐
    │   Routes (router, decoder, envelope)│  ← HTTP / wire-format concerns only
    ├─────────────────────────────────────┤
    │   Services (handlers, validation)   │  ← Business rules per operation
    ├─────────────────────────────────────┤
    │   Services (note store)             │  ← Parameterized SQL via SQLAlchemy
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async SQLite sessions
    └─────────────────────────────────────┘

    Request flow:
        HTTP → Router → Decoder → Validation → Handler → Store → Envelope → HTTP
"""

__version__ = "1.0.0"
