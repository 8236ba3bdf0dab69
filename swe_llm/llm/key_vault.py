"""Per-user provider credential resolution.

Users bring their own provider keys, stored encrypted in the caller's
configuration and decrypted here on every call (never cached). Users on
the allow-list run on platform-shared credentials instead, signalled by
returning ``None``.
"""

import logging

from cryptography.fernet import InvalidToken

from swe_llm.allowed_users import is_allowed_user
from swe_llm.crypto import decrypt_secret
from swe_llm.exceptions import ConfigurationError, MissingCredentialError
from swe_llm.llm.config import ApiKeyBundle, CallerConfig
from swe_llm.llm.providers import Provider, get_capability
from swe_llm.settings import Settings, get_settings

logger = logging.getLogger(__name__)

API_KEY_REQUIRED_MESSAGE = (
    "No API keys found. Please add your provider API keys in the settings page."
)


def _missing_key_message(provider: Provider) -> str:
    return f"No API key found for provider: {provider}. Please add one in the settings page."


class ProviderKeyVault:
    """Resolve decrypted API keys for a caller and provider."""

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()

    def _encryption_secret(self) -> str:
        secret = self._settings.secrets_encryption_key.get_secret_value()
        if not secret:
            raise ConfigurationError("SECRETS_ENCRYPTION_KEY environment variable is required")
        return secret

    def _check_caller(self, caller_config: CallerConfig) -> tuple[str, bool]:
        """Validate process secret and caller identity.

        Returns:
            (encryption secret, whether the caller is allow-listed)
        """
        secret = self._encryption_secret()
        if not caller_config.user_login:
            raise ConfigurationError("User login not found in config")
        return secret, is_allowed_user(caller_config.user_login, self._settings)

    def _require_bundle(self, caller_config: CallerConfig, provider: Provider) -> ApiKeyBundle:
        if caller_config.api_keys is None:
            raise MissingCredentialError(API_KEY_REQUIRED_MESSAGE, provider=provider)
        return caller_config.api_keys

    def _decrypt(self, encrypted: str | None, provider: Provider, secret: str) -> str:
        if not encrypted:
            raise MissingCredentialError(_missing_key_message(provider), provider=provider)
        try:
            api_key = decrypt_secret(encrypted, secret)
        except InvalidToken as e:
            logger.warning("Failed to decrypt API key for provider %s", provider)
            raise MissingCredentialError(
                _missing_key_message(provider), provider=provider
            ) from e
        if not api_key:
            raise MissingCredentialError(_missing_key_message(provider), provider=provider)
        return api_key

    def resolve_user_key(self, caller_config: CallerConfig, provider: Provider | str) -> str | None:
        """Decrypted key for ``provider``, or ``None`` for allow-listed callers.

        Raises:
            ConfigurationError: If the process secret or the caller's login is missing
            MissingCredentialError: If no usable key exists for the provider
        """
        provider = Provider(provider)
        secret, allowed = self._check_caller(caller_config)
        if allowed:
            return None

        bundle = self._require_bundle(caller_config, provider)
        if provider is Provider.OPENROUTER:
            if not bundle.openrouter:
                raise MissingCredentialError("No OpenRouter API keys provided.", provider=provider)
            return self._decrypt(bundle.openrouter[0], provider, secret)

        encrypted = getattr(bundle, get_capability(provider).api_key_field)
        return self._decrypt(encrypted, provider, secret)

    def resolve_openrouter_keys(self, caller_config: CallerConfig) -> list[str] | None:
        """Decrypt the caller's whole OpenRouter key pool, in order.

        Returns ``None`` for allow-listed callers.
        """
        secret, allowed = self._check_caller(caller_config)
        if allowed:
            return None

        bundle = self._require_bundle(caller_config, Provider.OPENROUTER)
        if not bundle.openrouter:
            raise MissingCredentialError(
                "No OpenRouter API keys provided.", provider=Provider.OPENROUTER
            )
        return [self._decrypt(key, Provider.OPENROUTER, secret) for key in bundle.openrouter]
