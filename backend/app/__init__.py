"""Throwback Backend — admin API for users and video shorts.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
