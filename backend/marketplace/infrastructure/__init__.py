"""Infrastructure Layer — persistence, external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure never decides business rules (core/ does)
    - All external calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Repositories implement the Protocols in core/repository_protocols.py
"""
