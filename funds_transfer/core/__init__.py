"""Core Layer — pure domain logic, no IO, no DB writes.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or models/
    - Rule functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: services orchestrate the
      awaited storage calls around these rules
"""
