"""Session token response decoding and fallback token synthesis."""

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from checkout_explorer.exceptions import MalformedResponseError


class TokenShape(str, Enum):
    """Accepted token response shapes."""

    FLAT = "flat"  # {"token": "..."}
    NESTED = "nested"  # {"data": {"checkoutToken": "..."}}


class _FlatTokenBody(BaseModel):
    token: str = Field(min_length=1)


class _NestedTokenData(BaseModel):
    checkout_token: str = Field(alias="checkoutToken", min_length=1)


class _NestedTokenBody(BaseModel):
    data: _NestedTokenData


@dataclass(frozen=True)
class DecodedToken:
    value: str
    shape: TokenShape


def decode_token_response(payload: Any) -> DecodedToken:
    """
    Decode a token response into one of the known shapes.

    The flat shape wins when both are present.

    Raises:
        MalformedResponseError: The payload matches neither shape.
    """
    try:
        flat = _FlatTokenBody.model_validate(payload)
    except ValidationError:
        pass
    else:
        return DecodedToken(flat.token, TokenShape.FLAT)

    try:
        nested = _NestedTokenBody.model_validate(payload)
    except ValidationError:
        pass
    else:
        return DecodedToken(nested.data.checkout_token, TokenShape.NESTED)

    raise MalformedResponseError(
        "Token response contained neither token nor data.checkoutToken",
        payload,
    )


def _random_suffix() -> str:
    return secrets.token_hex(4)


def synthesize_fallback_token(
    checkout_id: str,
    clock: Callable[[], float] = time.time,
    suffix: Callable[[], str] = _random_suffix,
) -> str:
    """
    Build a local stand-in token: ``<epoch millis>-<checkout id[:8]>-<random hex>``.

    Always starts with digits; two calls for the same checkout differ in the suffix.
    """
    return f"{int(clock() * 1000)}-{checkout_id[:8]}-{suffix()}"
