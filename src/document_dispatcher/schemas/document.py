"""Document payload schemas.

Field names follow the wire format of the target endpoint, which mixes
snake_case and camelCase. Dates serialize as ``YYYY-MM-DD``.
"""

from datetime import date

from pydantic import Field

from .base import SchemaBase
from .enums import DocType

DEFAULT_DATE = date(2020, 1, 23)


class Description(SchemaBase):
    """Document description block."""

    participantInn: str = "string"  # noqa: N815


class Product(SchemaBase):
    """A single product line of a document."""

    certificate_document: str = "string"
    certificate_document_date: date = DEFAULT_DATE
    certificate_document_number: str = "string"
    owner_inn: str = "string"
    producer_inn: str = "string"
    production_date: date = DEFAULT_DATE
    tnved_code: str = "string"
    uit_code: str = "string"
    uitu_code: str = "string"


class Document(SchemaBase):
    """Goods introduction document submitted for delivery."""

    description: Description = Field(default_factory=Description)
    doc_id: str = "string"
    doc_status: str = "string"
    doc_type: DocType = DocType.LP_INTRODUCE_GOODS
    importRequest: bool = True  # noqa: N815
    owner_inn: str = "string"
    participant_inn: str = "string"
    producer_inn: str = "string"
    production_date: date = DEFAULT_DATE
    production_type: str = "string"
    products: list[Product] = Field(default_factory=lambda: [Product()])
    reg_date: date = DEFAULT_DATE
    reg_number: str = "string"
