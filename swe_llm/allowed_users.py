"""Allow-list of users permitted to run on platform-shared credentials."""

import json
import logging

from swe_llm.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def parse_allowed_users(raw: str) -> list[str]:
    """Parse the JSON allow-list. Invalid JSON yields an empty list."""
    if not raw:
        return []
    try:
        users = json.loads(raw)
    except json.JSONDecodeError:
        logger.error("Failed to parse allowed users list")
        return []
    if not isinstance(users, list):
        logger.error("Allowed users list must be a JSON array")
        return []
    return [str(u) for u in users]


def is_allowed_user(username: str, settings: Settings | None = None) -> bool:
    """Whether ``username`` may use platform credentials instead of their own keys.

    Everyone is allowed outside production, and in production unless
    ``restrict_to_auth`` is enabled, in which case the login must be listed.
    """
    settings = settings or get_settings()
    if settings.environment != "production":
        return True
    if not settings.restrict_to_auth:
        return True

    allowed = parse_allowed_users(settings.allowed_users_list)
    if not allowed:
        return False
    return username in allowed
