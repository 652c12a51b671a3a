"""API Layer — FastAPI routes, dependencies, middleware and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses (204 excepted)

Design Decisions:
    - Thin routes: validate → service → mapper → broadcast, nothing else
"""
