"""Services Layer — database-backed use cases called by thin routes.

Invariants:
    - Services raise ThrowbackError subclasses, never HTTPException
    - Each use case commits its own transaction
"""
