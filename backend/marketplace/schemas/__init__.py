"""Pydantic Schemas — request/response validation for API endpoints.

Invariants:
    - Schemas validate at system boundary (request bodies, response shapes)
    - Wire names are camelCase (itemId, transactionHash); Python names snake_case

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence
"""
