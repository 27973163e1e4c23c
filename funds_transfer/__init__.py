"""Funds Transfer Engine — account-to-account transfers with optimistic concurrency.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
