"""Enums for Pydantic schemas."""

from enum import Enum


class DocType(str, Enum):
    """Types of documents accepted by the target endpoint."""

    LP_INTRODUCE_GOODS = "LP_INTRODUCE_GOODS"
