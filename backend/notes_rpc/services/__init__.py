# Services package init
"""
Notes RPC Backend — Services Layer
====================================

What:  Business logic between the RPC router (HTTP) and the SQLite store.
How:   The router builds a NoteStore on the request's session and hands it
       to a NoteService; handlers validate input, apply the note rules and
       return the result payload or raise an RpcError.

Service Inventory:
    - NoteService:    the five note operations plus the greeting payload
    - NoteStore:      SQL access to the notes table; typed UniqueViolation
    - validate_input: pydantic schema → BadRequestError adapter
"""
