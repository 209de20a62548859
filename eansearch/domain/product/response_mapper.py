"""
EAN-Search response mapper.

Classifies raw response bodies into typed outcomes. Shapes are tried
in a fixed order: the success shape first, then the error shape
``[{"error": "..."}]``. A body matching neither raises UndefinedAPIError.
"""

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from eansearch.domain.product.models import ErrorReply
from eansearch.domain.shared.errors import UndefinedAPIError

T = TypeVar("T", bound=BaseModel)

PRODUCT_LIST_FIELD = "productlist"

_ERROR_LIST: TypeAdapter[list[ErrorReply]] = TypeAdapter(list[ErrorReply])


@dataclass(frozen=True)
class Decoded(Generic[T]):
    """Body matched the success shape.

    ``value`` is None when the service answered with an empty result.
    """

    value: Optional[T]


DecodeResult = Union[Decoded[T], ErrorReply]


@lru_cache(maxsize=None)
def _optional_list_adapter(model: type[BaseModel]) -> TypeAdapter[Any]:
    return TypeAdapter(Optional[list[model]])  # type: ignore[valid-type]


@lru_cache(maxsize=None)
def _list_adapter(model: type[BaseModel]) -> TypeAdapter[Any]:
    return TypeAdapter(list[model])  # type: ignore[valid-type]


def decode_error(body: str) -> Optional[ErrorReply]:
    """Parse the error shape.

    Args:
        body: Raw response text

    Returns:
        First error object, or None if the body is not an error array

    Example:
        >>> reply = decode_error('[{"error": "Invalid token"}]')
        >>> assert reply is not None and reply.error == "Invalid token"
        >>> assert decode_error("[]") is None
    """
    try:
        errors = _ERROR_LIST.validate_json(body)
    except ValidationError:
        return None
    return errors[0] if errors else None


def _error_or_undefined(body: str) -> ErrorReply:
    reply = decode_error(body)
    if reply is None:
        raise UndefinedAPIError()
    return reply


def decode_single(body: str, model: type[T]) -> DecodeResult[T]:
    """Decode a one-element array response.

    Args:
        body: Raw response text
        model: Record type of the array elements

    Returns:
        Decoded holding the first element (None for ``null`` or ``[]``),
        or the ErrorReply the service sent

    Raises:
        UndefinedAPIError: If neither shape matches
    """
    try:
        items = _optional_list_adapter(model).validate_json(body)
    except ValidationError:
        return _error_or_undefined(body)
    return Decoded(items[0] if items else None)


def decode_object(body: str, model: type[T]) -> DecodeResult[T]:
    """Decode a bare JSON object response (account-status).

    Raises:
        UndefinedAPIError: If neither shape matches
    """
    try:
        return Decoded(model.model_validate_json(body))
    except ValidationError:
        return _error_or_undefined(body)


def decode_product_list(body: str, model: type[T]) -> Union[list[T], ErrorReply]:
    """Decode a list-operation response.

    List responses are JSON objects, so an error array can never be
    mistaken for a result; the error shape is checked first.

    Args:
        body: Raw response text
        model: Record type of the ``productlist`` entries

    Returns:
        Typed product list (possibly empty) or the ErrorReply

    Raises:
        UndefinedAPIError: If the body is not an object with a
            valid ``productlist`` field

    Example:
        >>> from eansearch.domain.product.models import Product
        >>> decode_product_list('{"productlist": []}', Product)
        []
    """
    reply = decode_error(body)
    if reply is not None:
        return reply

    try:
        data = json.loads(body)
        return _list_adapter(model).validate_python(data[PRODUCT_LIST_FIELD])
    except (ValueError, KeyError, TypeError) as e:
        raise UndefinedAPIError() from e
