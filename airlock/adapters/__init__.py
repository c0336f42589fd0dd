"""Infrastructure adapters.

Adapters implement protocols defined in core/protocols/.
Each adapter wraps a data-access layer (SQLAlchemy, in-memory data).
"""
