# venefoods/models/setting.py
from sqlmodel import SQLModel, Field


class SiteSetting(SQLModel, table=True):
    """
    Key/value row of the `site_settings` table.

    Values are always strings; the settings service parses them
    (numbers, booleans, JSON zone lists).
    """

    __tablename__ = "site_settings"

    key: str = Field(primary_key=True, max_length=64)
    value: str = Field(default="")
