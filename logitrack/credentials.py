from enum import Enum
from typing import Protocol

from logitrack.config import Settings

URL_PLACEHOLDER = "YOUR_PROJECT_REF"
KEY_PLACEHOLDER_PREFIX = "YOUR_"
MIN_KEY_LENGTH = 20


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class CredentialProvider(Protocol):
    def key_for(self, role: Role) -> str | None:
        ...


class SettingsCredentials:
    """Admin requests use the secret key, users the publishable one."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def key_for(self, role: Role) -> str | None:
        if role == Role.ADMIN:
            return self.settings.SUPABASE_SECRET_KEY
        if role == Role.USER:
            return self.settings.SUPABASE_PUBLISHABLE_KEY
        return None


def is_key_usable(key: str | None) -> bool:
    if not key:
        return False
    if key.startswith(KEY_PLACEHOLDER_PREFIX):
        return False
    return len(key) >= MIN_KEY_LENGTH


def is_config_ready(settings: Settings, credentials: CredentialProvider, role: Role) -> bool:
    if not settings.SUPABASE_ENABLED:
        return False
    if not settings.SUPABASE_URL or URL_PLACEHOLDER in settings.SUPABASE_URL:
        return False
    return is_key_usable(credentials.key_for(role))
