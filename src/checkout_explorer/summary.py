"""Formatted view of a checkout payload."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from checkout_explorer.models.checkout import Address, Checkout

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "CAD": "CA$",
    "AUD": "A$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


def format_currency(amount: float, currency_code: str = "USD") -> str:
    """Format like ``$1,234.50``; unknown codes render as ``1,234.50 SEK``."""
    code = (currency_code or "USD").upper()
    sign = "-" if amount < 0 else ""
    digits = f"{abs(amount):,.2f}"
    symbol = CURRENCY_SYMBOLS.get(code)
    if symbol:
        return f"{sign}{symbol}{digits}"
    return f"{sign}{digits} {code}"


def format_timestamp(value: str | None) -> str:
    """ISO 8601 timestamp to ``YYYY-MM-DD HH:MM:SS``; '-' when missing, unchanged when unparseable."""
    if not value:
        return "-"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def format_address(address: Address | None) -> list[str]:
    if address is None:
        return []
    name = " ".join(p for p in (address.first_name, address.last_name) if p)
    region = " ".join(p for p in (address.state_or_province, address.postal_code) if p)
    city_line = ", ".join(p for p in (address.city, region) if p)
    lines = [name, address.company, address.address1, address.address2, city_line, address.country]
    return [line for line in lines if line]


class SummaryLineItem(BaseModel):
    kind: str  # physical, digital, custom
    name: str
    sku: str | None = None
    quantity: int
    unit_price: str
    total: str


class CheckoutTotals(BaseModel):
    subtotal: str
    shipping: str
    handling: str
    tax: str
    discounts: str
    grand_total: str


class CheckoutSummary(BaseModel):
    """Display-ready checkout overview."""

    checkout_id: str
    cart_id: str
    currency: str
    customer_email: str | None = None
    created: str
    updated: str
    item_count: int
    totals: CheckoutTotals
    line_items: list[SummaryLineItem] = Field(default_factory=list)
    billing_address: list[str] = Field(default_factory=list)
    shipping_options: list[str] = Field(default_factory=list)
    coupons: list[str] = Field(default_factory=list)
    taxes: list[str] = Field(default_factory=list)
    customer_message: str | None = None


def summarize_checkout(payload: dict[str, Any] | Checkout) -> CheckoutSummary:
    """
    Build the formatted summary for a raw checkout payload.

    Raises:
        pydantic.ValidationError: The payload is not a checkout.
    """
    checkout = payload if isinstance(payload, Checkout) else Checkout.model_validate(payload)
    data = checkout.data
    cart = data.cart
    currency = cart.currency.code if cart.currency else "USD"

    def money(amount: float) -> str:
        return format_currency(amount, currency)

    items: list[SummaryLineItem] = []
    for kind, line_items in (
        ("physical", cart.line_items.physical_items),
        ("digital", cart.line_items.digital_items),
    ):
        for item in line_items:
            items.append(
                SummaryLineItem(
                    kind=kind,
                    name=item.name,
                    sku=item.sku,
                    quantity=item.quantity,
                    unit_price=money(item.sale_price),
                    total=money(item.extended_sale_price or item.sale_price * item.quantity),
                )
            )
    for custom in cart.line_items.custom_items:
        items.append(
            SummaryLineItem(
                kind="custom",
                name=custom.name,
                sku=custom.sku,
                quantity=custom.quantity,
                unit_price=money(custom.list_price),
                total=money(custom.list_price * custom.quantity),
            )
        )

    shipping_options = []
    for consignment in data.consignments:
        option = consignment.selected_shipping_option
        if option:
            shipping_options.append(f"{option.description} ({money(option.cost)})")

    return CheckoutSummary(
        checkout_id=data.id,
        cart_id=cart.id,
        currency=currency,
        customer_email=cart.email or (data.billing_address.email if data.billing_address else None),
        created=format_timestamp(data.created_time or cart.created_time),
        updated=format_timestamp(data.updated_time or cart.updated_time),
        item_count=sum(item.quantity for item in items),
        totals=CheckoutTotals(
            subtotal=money(data.subtotal_inc_tax),
            shipping=money(data.shipping_cost_total_inc_tax),
            handling=money(data.handling_cost_total_inc_tax),
            tax=money(data.tax_total),
            discounts=money(cart.discount_amount),
            grand_total=money(data.grand_total),
        ),
        line_items=items,
        billing_address=format_address(data.billing_address),
        shipping_options=shipping_options,
        coupons=[f"{c.code} (-{money(c.discounted_amount)})" for c in data.coupons],
        taxes=[f"{t.name}: {money(t.amount)}" for t in data.taxes],
        customer_message=data.customer_message or None,
    )
