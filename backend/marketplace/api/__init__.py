"""API Layer — FastAPI routes, dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return JSON; errors always carry a string "error" field

Design Decisions:
    - Thin routes delegate to services
"""
