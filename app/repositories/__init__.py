"""Data access for ORM models."""

from app.repositories.users import UserRepository

__all__ = ["UserRepository"]
