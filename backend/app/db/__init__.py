"""Database Metadata — SQLAlchemy declarative Base.

Invariants:
    - One Base per process; every ORM model registers its table here
"""
