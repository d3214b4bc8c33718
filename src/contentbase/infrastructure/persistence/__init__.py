"""Persistence layer: SQLAlchemy models, repositories and the value store."""
