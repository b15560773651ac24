"""Checkout payload models (BigCommerce Checkouts API v3).

Only the fields the explorer reads are declared. Unknown fields are kept so
the raw payload survives a parse/dump cycle.
"""

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow")


class Discount(_Payload):
    id: str | int | None = None
    discounted_amount: float = 0.0


class Coupon(_Payload):
    id: int | str | None = None
    code: str = ""
    coupon_type: str | int | None = None
    display_name: str = ""
    discounted_amount: float = 0.0


class LineItem(_Payload):
    """Physical or digital cart item."""

    id: str
    name: str
    sku: str | None = None
    product_id: int | None = None
    variant_id: int | None = None
    quantity: int = 1
    list_price: float = 0.0
    sale_price: float = 0.0
    extended_list_price: float = 0.0
    extended_sale_price: float = 0.0
    image_url: str | None = None


class CustomItem(_Payload):
    id: str
    name: str
    sku: str | None = None
    quantity: int = 1
    list_price: float = 0.0


class LineItems(_Payload):
    physical_items: list[LineItem] = Field(default_factory=list)
    digital_items: list[LineItem] = Field(default_factory=list)
    custom_items: list[CustomItem] = Field(default_factory=list)


class Currency(_Payload):
    code: str = "USD"


class Cart(_Payload):
    id: str
    customer_id: int | None = None
    channel_id: int | None = None
    email: str | None = None
    currency: Currency | None = None
    base_amount: float = 0.0
    discount_amount: float = 0.0
    cart_amount_inc_tax: float = 0.0
    cart_amount_ex_tax: float = 0.0
    line_items: LineItems = Field(default_factory=LineItems)
    created_time: str | None = None
    updated_time: str | None = None


class Address(_Payload):
    id: str | int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    company: str | None = None
    address1: str | None = None
    address2: str | None = None
    city: str | None = None
    state_or_province: str | None = None
    state_or_province_code: str | None = None
    country: str | None = None
    country_code: str | None = None
    postal_code: str | None = None
    phone: str | None = None


class ShippingOption(_Payload):
    id: str
    type: str | None = None
    description: str = ""
    cost: float = 0.0
    transit_time: str | None = None


class Consignment(_Payload):
    id: str
    shipping_cost_inc_tax: float = 0.0
    shipping_cost_ex_tax: float = 0.0
    handling_cost_inc_tax: float = 0.0
    handling_cost_ex_tax: float = 0.0
    line_item_ids: list[str] = Field(default_factory=list)
    selected_shipping_option: ShippingOption | None = None
    available_shipping_options: list[ShippingOption] = Field(default_factory=list)
    address: Address | None = None


class Tax(_Payload):
    name: str
    amount: float = 0.0


class CheckoutData(_Payload):
    """The ``data`` object of a checkout response."""

    id: str
    cart: Cart
    billing_address: Address | None = None
    consignments: list[Consignment] = Field(default_factory=list)
    taxes: list[Tax] = Field(default_factory=list)
    coupons: list[Coupon] = Field(default_factory=list)
    shipping_cost_total_inc_tax: float = 0.0
    shipping_cost_total_ex_tax: float = 0.0
    handling_cost_total_inc_tax: float = 0.0
    handling_cost_total_ex_tax: float = 0.0
    tax_total: float = 0.0
    subtotal_inc_tax: float = 0.0
    subtotal_ex_tax: float = 0.0
    grand_total: float = 0.0
    created_time: str | None = None
    updated_time: str | None = None
    customer_message: str | None = None


class Checkout(_Payload):
    """Full checkout response envelope."""

    data: CheckoutData
    meta: dict | None = None
