# venefoods/routers/settings.py
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session

from venefoods.core.auth import require_admin
from venefoods.database import get_session
from venefoods.repositories.settings_repo import SettingsRepository
from venefoods.schemas.settings import SettingUpdate, StoreSettings
from venefoods.services.settings_service import SettingsService

router = APIRouter(prefix="/settings", tags=["Settings"])

repo = SettingsRepository()
service = SettingsService(repo)


@router.get("", response_model=StoreSettings)
def get_store_settings(session: Session = Depends(get_session)):
    """
    Public store configuration: open/closed state, banner, shipping
    zones, free-shipping threshold, WhatsApp number.
    """
    return service.get_store_settings(session)


@router.put(
    "/{key}",
    response_model=StoreSettings,
    dependencies=[Depends(require_admin)],
)
def update_setting(
    key: str,
    payload: SettingUpdate,
    session: Session = Depends(get_session),
):
    """
    Write one setting (admin only). Unknown keys answer 400.

    Setting shipping_min_value to 0 turns free shipping off rather than
    making every order ship free.
    """
    return service.update_setting(session, key, payload.value)


@router.post(
    "/banner",
    response_model=StoreSettings,
    dependencies=[Depends(require_admin)],
    summary="Upload the home banner",
)
def upload_banner(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    """
    Upload a new home banner image (JPEG, PNG, WEBP).
    """
    file_bytes = file.file.read()
    return service.update_banner(session, file.content_type, file_bytes)
