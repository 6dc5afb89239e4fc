"""Declarative base shared by the user and profile models."""

from core.db import Base

__all__ = ["Base"]
