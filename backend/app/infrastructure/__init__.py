"""Infrastructure Layer — database access, real-time transport, logging.

Invariants:
    - Infrastructure never imports from api/ or services/
    - Storage errors surface as DatabaseError once they leave a session

Design Decisions:
    - One class per external resource, owned by the app lifespan
"""
