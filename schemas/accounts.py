"""
Authentication principal schemas.

Tables: brukere (admin users), klient (client logins)
Purpose: Accounts provisioned by create_user.py and watched by monitor_logins.py.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserAccount(BaseModel):
    """Admin user (table: brukere)."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: Optional[int] = Field(default=None, description="Primary key")
    name: str = Field(alias='navn', description="Display name")
    email: str = Field(alias='epost', description="Login e-mail, unique")
    password_hash: str = Field(alias='passord_hash', description="bcrypt hash")
    role: str = Field(default='admin', alias='rolle')
    active: bool = Field(default=True, alias='aktiv')
    last_login: Optional[datetime] = Field(default=None, alias='sist_innlogget')


class ClientAccount(BaseModel):
    """Client login (table: klient)."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: Optional[int] = Field(default=None, description="Primary key")
    name: str = Field(alias='navn')
    email: str = Field(alias='epost')
    password_hash: str = Field(alias='passord_hash')
    company: Optional[str] = Field(default=None, alias='firma')
    active: bool = Field(default=True, alias='aktiv')
    last_login: Optional[datetime] = Field(default=None, alias='sist_innlogget')
