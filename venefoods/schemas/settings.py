# venefoods/schemas/settings.py
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from venefoods.schemas.product import coerce_price

StoreStatus = Literal["open", "closed"]

# Keys the back-office is allowed to write
SETTING_KEYS = (
    "store_status",
    "store_closed_message",
    "shipping_min_value",
    "home_banner",
    "shipping_zones",
    "whatsapp_number",
    "pix_key",
    "top_bar_text",
    "top_bar_active",
)


class ShippingZone(SQLModel):
    """
    Named delivery area with a flat price.
    """

    name: str = Field(min_length=1, max_length=80)
    price: Decimal = Field(ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("zone name cannot be empty")
        return v

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return coerce_price(v)


class StoreSettings(SQLModel):
    """
    Parsed view of the `site_settings` table.

    shipping_min_value == 0 disables free shipping: every order then pays
    its zone price. It does not make shipping always free.
    """

    store_status: StoreStatus = "open"
    store_closed_message: str = "Cerrado temporalmente"
    shipping_min_value: Decimal = Decimal("0.00")
    home_banner: str = ""
    shipping_zones: list[ShippingZone] = []
    whatsapp_number: str = ""
    pix_key: str = ""
    top_bar_text: str = ""
    top_bar_active: bool = False

    @property
    def is_open(self) -> bool:
        return self.store_status == "open"


class SettingUpdate(SQLModel):
    """
    Admin payload for one setting. `value` is stored as a string; zone
    lists may be sent as a JSON array.
    """

    model_config = ConfigDict(extra="forbid")

    value: str | int | float | bool | list[ShippingZone]
