# venefoods/schemas/admin.py
from sqlmodel import SQLModel


class AdminPrincipal(SQLModel):
    """
    Back-office operator resolved from a Supabase access token.
    """

    id: str
    email: str
