from typing import Any, Optional, Union

from pydantic import BaseModel, field_validator


def _as_text(value):
    # Order ids are natural keys; accept numbers from JSON clients as text.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class CustomerRequest(BaseModel):
    """Body of POST /customers."""
    name: Optional[str] = None
    email: Optional[str] = None


class CheckoutRequest(BaseModel):
    """Body of POST /orders/checkout."""
    orderId: Optional[str] = None
    customerId: Optional[int] = None
    # Any number or text; the store decides what it can keep.
    amount: Optional[Union[float, str]] = None
    last4: Optional[str] = None

    @field_validator("orderId", "last4", mode="before")
    @classmethod
    def ids_as_text(cls, value):
        return _as_text(value)


class SettleRequest(BaseModel):
    """Body of POST /payments/settle."""
    orderId: Optional[str] = None
    amount: Optional[Union[float, str]] = None

    @field_validator("orderId", mode="before")
    @classmethod
    def order_id_as_text(cls, value):
        return _as_text(value)


class AuthorizeRequest(BaseModel):
    """Body of POST /authorize, in the gateway's own field naming."""
    OrderId: Optional[Any] = None
    RequestedAmount: Optional[Any] = None
