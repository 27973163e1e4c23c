"""Infrastructure Layer — database sessions and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/ or api/
    - Every SQLAlchemy failure is mapped to core.errors.DatabaseError

Design Decisions:
    - Thin wrappers over raw clients; the domain sees Protocols, not engines
"""
