"""Pydantic schemas for dispatched documents."""

from .base import SchemaBase
from .document import Description, Document, Product
from .enums import DocType

__all__ = [
    "Description",
    "DocType",
    "Document",
    "Product",
    "SchemaBase",
]
