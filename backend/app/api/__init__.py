"""API Layer — FastAPI routes, auth dependencies, upload handler and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Errors reach clients only through api/error_handlers.py
"""
