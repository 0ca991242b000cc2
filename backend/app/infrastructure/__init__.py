"""Infrastructure Layer — database, security, disk storage and logging.

Invariants:
    - Infrastructure never imports from api/ or services/
    - External failures are mapped to ThrowbackError subclasses (core/errors.py)
"""
