"""Base schema class for dispatched documents."""

from pydantic import BaseModel, ConfigDict


class SchemaBase(BaseModel):
    """Base class for all document schemas.

    Unknown fields are rejected and assignments are validated, so that a
    decoded payload compares equal, field by field, to the document that
    was submitted. String values are kept exactly as given.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )
