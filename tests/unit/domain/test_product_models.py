"""
Unit tests for EAN-Search domain models.
"""

import base64
import binascii

import pytest
from pydantic import ValidationError

from eansearch.domain.product.models import (
    AccountStatus,
    BarcodeImage,
    ChecksumResult,
    ExtProduct,
    Product,
    ProductCountry,
)


class TestProduct:
    """Test Product model."""

    def test_parse_camel_case_payload(self) -> None:
        """Should map external names and parse string ids."""
        product = Product.model_validate(
            {
                "ean": "5099750442227",
                "name": "Michael Jackson - Thriller",
                "categoryId": "45",
                "categoryName": "Music",
                "issuingCountry": "UK",
            }
        )

        assert product.ean == 5099750442227
        assert product.name == "Michael Jackson - Thriller"
        assert product.category_id == 45
        assert product.category_name == "Music"
        assert product.issuing_country == "UK"

    def test_leading_zeros_and_padding(self) -> None:
        """UPC codes keep their leading zeros when rendered."""
        product = Product.model_validate(
            {
                "ean": "0012345678905",
                "name": "Widget",
                "categoryId": "1",
                "categoryName": "Tools",
                "issuingCountry": "US",
            }
        )

        assert product.ean == 12345678905
        assert product.padded_ean == "0012345678905"

    def test_display(self) -> None:
        product = Product(
            ean=5099750442227,
            name="Thriller",
            category_id=45,
            category_name="Music",
            issuing_country="UK",
        )

        assert str(product) == "EAN 5099750442227: Thriller (category 45: Music) from UK"

    def test_non_numeric_ean_rejected(self) -> None:
        with pytest.raises(ValueError):
            Product.model_validate(
                {
                    "ean": "abc",
                    "name": "x",
                    "categoryId": "1",
                    "categoryName": "y",
                    "issuingCountry": "DE",
                }
            )

    def test_missing_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Product.model_validate({"ean": "1", "name": "x"})

    def test_immutable(self) -> None:
        product = Product(
            ean=1,
            name="x",
            category_id=1,
            category_name="y",
            issuing_country="DE",
        )

        with pytest.raises(ValidationError):
            product.name = "changed"  # type: ignore[misc]


class TestExtProduct:
    """Test ExtProduct model."""

    def test_google_category_parsed(self) -> None:
        product = ExtProduct.model_validate(
            {
                "ean": "5099750442227",
                "name": "Michael Jackson - Thriller",
                "categoryId": "45",
                "categoryName": "Music",
                "googleCategoryId": "855",
                "issuingCountry": "UK",
            }
        )

        assert product.google_category_id == 855
        assert product.category_id == 45

    @pytest.mark.parametrize("value", ["", "  ", None])
    def test_blank_google_category(self, value: object) -> None:
        product = ExtProduct.model_validate(
            {
                "ean": "4006381333931",
                "name": "Pen",
                "categoryId": "10",
                "categoryName": "Office",
                "googleCategoryId": value,
                "issuingCountry": "DE",
            }
        )

        assert product.google_category_id is None

    def test_not_a_product_subclass(self) -> None:
        assert not issubclass(ExtProduct, Product)


class TestScalarModels:
    """Test metadata response models."""

    def test_product_country(self) -> None:
        country = ProductCountry.model_validate({"ean": "5099750442227", "issuingCountry": "UK"})

        assert country.ean == 5099750442227
        assert country.issuing_country == "UK"

    @pytest.mark.parametrize(("valid", "expected"), [("1", True), ("0", False), ("", False)])
    def test_checksum_result(self, valid: str, expected: bool) -> None:
        result = ChecksumResult.model_validate({"ean": "1", "valid": valid})

        assert result.is_valid is expected

    def test_account_status_remaining(self) -> None:
        status = AccountStatus.model_validate({"id": 42, "requests": "150", "requestlimit": "1000"})

        assert status.id == "42"
        assert status.remaining == 850


class TestBarcodeImage:
    """Test BarcodeImage decoding."""

    PNG = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"

    def test_decode_unpadded(self) -> None:
        payload = base64.b64encode(self.PNG).decode().rstrip("=")
        assert not payload.endswith("=")

        image = BarcodeImage.model_validate({"ean": "5099750442227", "barcode": payload})

        assert image.decode() == self.PNG

    def test_decode_padded(self) -> None:
        payload = base64.b64encode(self.PNG).decode()

        image = BarcodeImage(ean=1, barcode=payload)

        assert image.decode() == self.PNG

    def test_decode_invalid(self) -> None:
        image = BarcodeImage(ean=1, barcode="not base64!")

        with pytest.raises(binascii.Error):
            image.decode()
