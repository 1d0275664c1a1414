# venefoods/services/settings_service.py
import json
import logging

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from sqlmodel import Session

from venefoods.core.config import get_settings
from venefoods.core.exceptions import TransientServiceError, ValidationError
from venefoods.core.money import D, round_money
from venefoods.core.storage_utils import banner_filename, upload_to_storage, validate_image
from venefoods.repositories.settings_repo import SettingsRepository
from venefoods.schemas.settings import SETTING_KEYS, ShippingZone, StoreSettings

logger = logging.getLogger(__name__)

_zones_adapter = TypeAdapter(list[ShippingZone])


def parse_zones(raw: str | None) -> list[ShippingZone]:
    """Unparsable or missing zone lists behave as "no zones configured"."""
    if not raw:
        return []
    try:
        return _zones_adapter.validate_json(raw)
    except PydanticValidationError:
        logger.warning("Ignoring malformed shipping_zones setting")
        return []


def parse_threshold(raw: str | None):
    try:
        value = round_money(D(raw))
    except ValueError:
        return round_money(0)
    return max(value, round_money(0))


class SettingsService:
    """
    Site settings: parsing for the storefront, key/value writes for
    the back-office.
    """

    def __init__(self, repo: SettingsRepository):
        self.repo = repo

    def get_store_settings(self, session: Session) -> StoreSettings:
        data = self.repo.all(session)

        status = data.get("store_status") or "open"
        if status not in ("open", "closed"):
            status = "open"

        return StoreSettings(
            store_status=status,
            store_closed_message=data.get("store_closed_message") or "Cerrado temporalmente",
            shipping_min_value=parse_threshold(data.get("shipping_min_value")),
            home_banner=data.get("home_banner") or "",
            shipping_zones=parse_zones(data.get("shipping_zones")),
            whatsapp_number=data.get("whatsapp_number") or get_settings().WHATSAPP_NUMBER,
            pix_key=data.get("pix_key") or "",
            top_bar_text=data.get("top_bar_text") or "",
            top_bar_active=(data.get("top_bar_active") or "").lower() == "true",
        )

    # ----- Admin -----

    def _serialize(self, key: str, value) -> str:
        if key == "shipping_zones":
            try:
                if isinstance(value, str):
                    zones = _zones_adapter.validate_json(value)
                else:
                    zones = _zones_adapter.validate_python(value)
            except PydanticValidationError:
                raise ValidationError("shipping_zones must be a list of {name, price}")
            return _zones_adapter.dump_json(zones).decode()

        if isinstance(value, list):
            raise ValidationError(f"{key} does not accept a list")

        if key == "store_status" and value not in ("open", "closed"):
            raise ValidationError("store_status must be 'open' or 'closed'")

        if key == "shipping_min_value":
            try:
                amount = round_money(D(value))
            except ValueError:
                raise ValidationError("shipping_min_value must be a number")
            if amount < 0:
                raise ValidationError("shipping_min_value cannot be negative")
            return str(amount)

        if isinstance(value, bool):
            return "true" if value else "false"

        return str(value)

    def update_setting(self, session: Session, key: str, value) -> StoreSettings:
        if key not in SETTING_KEYS:
            raise ValidationError(f"Unknown setting: {key}")

        self.repo.upsert(session, key, self._serialize(key, value))
        return self.get_store_settings(session)

    def update_banner(
        self,
        session: Session,
        content_type: str | None,
        file_bytes: bytes,
    ) -> StoreSettings:
        """
        Upload a new home banner to Storage and point `home_banner` at it.
        """
        ext = validate_image(content_type, file_bytes)
        try:
            url = upload_to_storage(f"banners/{banner_filename(ext)}", file_bytes, content_type)
        except Exception as exc:
            logger.exception("Banner upload failed")
            raise TransientServiceError("Error uploading image") from exc

        self.repo.upsert(session, "home_banner", url)
        return self.get_store_settings(session)
