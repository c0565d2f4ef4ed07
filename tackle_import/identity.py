from __future__ import annotations

import os
from typing import Protocol

from .models.config_models import IdentityConfig
from .models.records import User

"""Identity provider: who is signed in.

The committer asks for the current user immediately before writing and
tags every inserted row with the user's id. No user means "Not signed in.".
"""

__all__ = [
    "IdentityProvider",
    "EnvIdentityProvider",
    "NOT_SIGNED_IN",
]

NOT_SIGNED_IN = "Not signed in."


class IdentityProvider(Protocol):
    def get_current_user(self) -> User | None:
        ...


class EnvIdentityProvider:
    """Resolve the owner from TACKLE_OWNER_ID / TACKLE_OWNER_EMAIL.

    Falls back to the config file's ``identity`` section. Environment is read
    on every call so a .env loaded after construction still applies.
    """

    def __init__(self, fallback: IdentityConfig | None = None) -> None:
        self._fallback = fallback or IdentityConfig()

    def get_current_user(self) -> User | None:
        owner_id = (os.getenv("TACKLE_OWNER_ID") or self._fallback.owner_id or "").strip()
        if not owner_id:
            return None
        email = os.getenv("TACKLE_OWNER_EMAIL") or self._fallback.email
        return User(id=owner_id, email=email)
