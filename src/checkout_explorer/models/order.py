"""Credential, token and order models shared by the flow and the gateways."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StoreCredentials(BaseModel):
    """Store hash and API token, passed through untouched to BigCommerce."""

    model_config = ConfigDict(frozen=True)

    store_hash: str
    access_token: str = Field(repr=False)


class TokenSource(str, Enum):
    """Where a session token came from."""

    API_ISSUED = "api_issued"
    LOCALLY_SYNTHESIZED = "locally_synthesized"


class SessionToken(BaseModel):
    """Checkout session token, scoped to one checkout for one flow run."""

    model_config = ConfigDict(frozen=True)

    value: str
    source: TokenSource
    checkout_id: str

    @property
    def is_synthesized(self) -> bool:
        return self.source == TokenSource.LOCALLY_SYNTHESIZED


class OrderUpdate(BaseModel):
    """Payment and status fields applied to a freshly created order.

    ``status_id`` is not range-checked here; callers validate it against the
    status catalogue before building the update.
    """

    payment_method: str
    payment_provider_id: str
    status_id: int

    def to_payload(self) -> dict:
        return self.model_dump()
