"""
EAN-Search domain models.

Models for EAN-Search API responses mapped to our domain.
The service sends camelCase keys and string-encoded numeric ids;
aliases and validators translate both.
"""

import base64
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _int_from_text(value: Any) -> Any:
    """Parse decimal strings (leading zeros allowed) into int."""
    if isinstance(value, str):
        return int(value.strip())
    return value


class Product(BaseModel):
    """Product returned by the search operations.

    Example:
        >>> product = Product.model_validate(
        ...     {
        ...         "ean": "5099750442227",
        ...         "name": "Michael Jackson - Thriller",
        ...         "categoryId": "45",
        ...         "categoryName": "Music",
        ...         "issuingCountry": "UK",
        ...     }
        ... )
        >>> assert product.ean == 5099750442227
        >>> assert product.category_id == 45
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ean: int = Field(..., ge=0, description="EAN/GTIN barcode")
    name: str = Field(..., description="Product name")
    category_id: int = Field(..., alias="categoryId", description="EAN-Search category")
    category_name: str = Field(..., alias="categoryName", description="Category display name")
    issuing_country: str = Field(..., alias="issuingCountry", description="Country that issued the code")

    @field_validator("ean", "category_id", mode="before")
    @classmethod
    def parse_numeric_text(cls, v: Any) -> Any:
        """Numeric ids arrive as JSON strings."""
        return _int_from_text(v)

    @property
    def padded_ean(self) -> str:
        """EAN as 13 digits, zero padded."""
        return f"{self.ean:013d}"

    def __str__(self) -> str:
        return (
            f"EAN {self.ean}: {self.name} "
            f"(category {self.category_id}: {self.category_name}) "
            f"from {self.issuing_country}"
        )


class ExtProduct(BaseModel):
    """Product returned by barcode and ISBN lookups.

    Same fields as Product plus the Google product taxonomy id.

    Example:
        >>> product = ExtProduct.model_validate(
        ...     {
        ...         "ean": "5099750442227",
        ...         "name": "Michael Jackson - Thriller",
        ...         "categoryId": "45",
        ...         "categoryName": "Music",
        ...         "googleCategoryId": "855",
        ...         "issuingCountry": "UK",
        ...     }
        ... )
        >>> assert product.google_category_id == 855
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ean: int = Field(..., ge=0, description="EAN/GTIN barcode")
    name: str = Field(..., description="Product name")
    category_id: int = Field(..., alias="categoryId", description="EAN-Search category")
    category_name: str = Field(..., alias="categoryName", description="Category display name")
    google_category_id: Optional[int] = Field(
        None, alias="googleCategoryId", description="Google product taxonomy id"
    )
    issuing_country: str = Field(..., alias="issuingCountry", description="Country that issued the code")

    @field_validator("ean", "category_id", mode="before")
    @classmethod
    def parse_numeric_text(cls, v: Any) -> Any:
        """Numeric ids arrive as JSON strings."""
        return _int_from_text(v)

    @field_validator("google_category_id", mode="before")
    @classmethod
    def parse_optional_numeric_text(cls, v: Any) -> Any:
        """Empty string means no Google category."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return _int_from_text(v)

    @property
    def padded_ean(self) -> str:
        """EAN as 13 digits, zero padded."""
        return f"{self.ean:013d}"

    def __str__(self) -> str:
        return (
            f"EAN {self.ean}: {self.name} "
            f"(category {self.category_id}: {self.category_name}) "
            f"from {self.issuing_country}"
        )


class ProductCountry(BaseModel):
    """issuing-country response item."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ean: int
    issuing_country: str = Field(..., alias="issuingCountry")

    @field_validator("ean", mode="before")
    @classmethod
    def parse_ean(cls, v: Any) -> Any:
        return _int_from_text(v)


class ChecksumResult(BaseModel):
    """verify-checksum response item."""

    model_config = ConfigDict(frozen=True)

    ean: int
    valid: str

    @field_validator("ean", mode="before")
    @classmethod
    def parse_ean(cls, v: Any) -> Any:
        return _int_from_text(v)

    @property
    def is_valid(self) -> bool:
        return self.valid == "1"


class BarcodeImage(BaseModel):
    """barcode-image response item.

    Example:
        >>> image = BarcodeImage(ean=1, barcode="iVBORw0KGgo")
        >>> assert image.decode().startswith(b"\\x89PNG")
    """

    model_config = ConfigDict(frozen=True)

    ean: int
    barcode: str = Field(..., description="Base64 encoded PNG")

    @field_validator("ean", mode="before")
    @classmethod
    def parse_ean(cls, v: Any) -> Any:
        return _int_from_text(v)

    def decode(self) -> bytes:
        """Decode the image payload.

        The service omits base64 padding; it is restored before decoding.

        Returns:
            Raw PNG bytes

        Raises:
            binascii.Error: If the payload is not valid base64
        """
        data = self.barcode.strip()
        return base64.b64decode(data + "=" * (-len(data) % 4), validate=True)


class AccountStatus(BaseModel):
    """account-status response.

    Example:
        >>> status = AccountStatus(id="42", requests=100, requestlimit=1000)
        >>> assert status.remaining == 900
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Account id")
    requests: int = Field(..., ge=0, description="Requests used this cycle")
    requestlimit: int = Field(..., ge=0, description="Requests allowed per cycle")

    @field_validator("id", mode="before")
    @classmethod
    def id_as_text(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v

    @property
    def remaining(self) -> int:
        """Requests left in the current billing cycle."""
        return self.requestlimit - self.requests


class ErrorReply(BaseModel):
    """Error object returned by the service."""

    model_config = ConfigDict(frozen=True)

    error: str
