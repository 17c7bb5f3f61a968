"""Service Layer — imperative shell around the pure core.

Invariants:
    - Services own transactions: they commit on success and roll back on failure
    - Business decisions delegated to core/ (settlement_rules, pricing)
    - Persistence accessed only through repository Protocols

Design Decisions:
    - Services take repositories in the constructor: routes build them per request,
      tests can hand in fakes
"""
