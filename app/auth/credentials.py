"""Email/password check against the fixed demo credential table."""

from __future__ import annotations

import hmac
import logging
from types import MappingProxyType
from typing import Any, Mapping

from app.core.errors import AuthenticationError
from app.records.codec import StructuredFieldCodec
from app.records.entities import EntityType
from app.records.store import FieldFilter, RecordStore

logger = logging.getLogger(__name__)

# Placeholder until credentials live in a real credential store.
DEMO_PASSWORD_BY_EMAIL: Mapping[str, str] = MappingProxyType(
    {
        "alice.admin@inetum.com": "Admin#2026",
        "marc.manager@inetum.com": "Manager#2026",
        "theo.tech@inetum.com": "Tech#2026",
        "fatima.fonc@inetum.com": "Func#2026",
        "pierre.pm@inetum.com": "PM#2026",
        "diana.devco@inetum.com": "DevCo#2026",
    }
)


def passwords_match(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


async def authenticate(
    store: RecordStore,
    email: str | None,
    password: str | None,
    *,
    credentials: Mapping[str, str] = DEMO_PASSWORD_BY_EMAIL,
    codec: StructuredFieldCodec | None = None,
) -> dict[str, Any]:
    """Return the active user matching the credentials.

    Every failure raises the same :class:`AuthenticationError` so callers cannot
    tell an unknown email from a wrong password.
    """

    normalized = str(email or "").strip().lower()
    given = str(password or "")
    if not normalized or not given:
        raise AuthenticationError()

    expected = credentials.get(normalized)
    if expected is None or not passwords_match(given, expected):
        logger.info("Rejected sign-in attempt")
        raise AuthenticationError()

    active_users = await store.find(EntityType.USERS, [FieldFilter("active", True)])
    for user in active_users:
        if str(user.get("email") or "").lower() == normalized:
            return (codec or StructuredFieldCodec()).decode_record(EntityType.USERS, user)

    logger.info("Rejected sign-in attempt for inactive or missing user")
    raise AuthenticationError()
