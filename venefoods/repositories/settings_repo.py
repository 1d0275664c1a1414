# venefoods/repositories/settings_repo.py
from sqlmodel import Session, select

from venefoods.models.setting import SiteSetting


class SettingsRepository:
    """
    Key/value access to `site_settings`.
    """

    def all(self, session: Session) -> dict[str, str]:
        rows = session.exec(select(SiteSetting)).all()
        return {row.key: row.value for row in rows}

    def upsert(self, session: Session, key: str, value: str) -> SiteSetting:
        row = session.get(SiteSetting, key)
        if row is None:
            row = SiteSetting(key=key, value=value)
        else:
            row.value = value
        session.add(row)
        session.commit()
        session.refresh(row)
        return row
