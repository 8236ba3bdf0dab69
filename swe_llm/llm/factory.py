"""LLM provider client factory.

Builds a LangChain chat model for a resolved ``ModelLoadConfig``:
- OpenAI: ChatOpenAI
- Anthropic: ChatAnthropic (with an extended-thinking budget when requested)
- Google: ChatGoogleGenerativeAI via langchain-google-genai
- DeepSeek: ChatDeepSeek via langchain-deepseek
- Moonshot, Qwen, Z.AI: ChatOpenAI against the provider's compatible base URL
- OpenRouter: ChatOpenRouter with API key rotation

SDK clients are wrapped in ClassifiedChatModel so provider failures surface
as ProviderRateLimitError / ProviderUnavailableError.

Gateway providers come back as plain ChatOpenAI instances, so the true
provider is recorded under the returned handle (the model key). If that
record is gone it is inferred from the client's base URL.
"""

import logging
from dataclasses import dataclass
from typing import Any

from langchain_core.language_models import BaseChatModel

from swe_llm.exceptions import MissingCredentialError
from swe_llm.llm.classified import ClassifiedChatModel, unwrap_client
from swe_llm.llm.config import (
    DEFAULT_MAX_TOKENS,
    THINKING_BUDGET_TOKENS,
    CallerConfig,
    ModelLoadConfig,
)
from swe_llm.llm.key_vault import ProviderKeyVault
from swe_llm.llm.openrouter import ChatOpenRouter
from swe_llm.llm.providers import (
    Provider,
    ProviderCapability,
    get_capability,
    get_provider_base_url,
    infer_provider_from_base_url,
)
from swe_llm.llm.task_config import is_gpt5_family
from swe_llm.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Transport-level retries handed to the SDK clients
MAX_RETRIES = 3
ANTHROPIC_THINKING_TOKEN_MULTIPLIER = 4
CLAUDE_3_5_HAIKU_MAX_TOKENS = 8_192

# LangChain ``_llm_type`` values of the clients we build
_LLM_TYPE_TO_PROVIDER = {
    "openai-chat": Provider.OPENAI,
    "anthropic-chat": Provider.ANTHROPIC,
    "chat-google-generative-ai": Provider.GOOGLE_GENAI,
    "chat-deepseek": Provider.DEEPSEEK,
    "openrouter": Provider.OPENROUTER,
}


@dataclass(frozen=True)
class BuiltModel:
    """A constructed client plus the opaque handle identifying it."""

    client: BaseChatModel
    model_key: str


class ProviderIdentityRegistry:
    """Maps model keys to the provider that actually built the client."""

    def __init__(self) -> None:
        self._providers: dict[str, Provider] = {}

    def record(self, model_key: str, provider: Provider) -> None:
        self._providers[model_key] = Provider(provider)

    def get(self, model_key: str) -> Provider | None:
        return self._providers.get(model_key)

    def clear(self) -> None:
        self._providers.clear()

    def __len__(self) -> int:
        return len(self._providers)


def get_client_base_url(client: Any) -> str | None:
    """Configured base URL of a client, whatever the SDK calls it."""
    client = unwrap_client(client)
    for attr in ("openai_api_base", "api_base", "base_url"):
        value = getattr(client, attr, None)
        if isinstance(value, str) and value:
            return value
    return None


def get_client_model_name(client: Any) -> str | None:
    client = unwrap_client(client)
    for attr in ("model_name", "model"):
        value = getattr(client, attr, None)
        if isinstance(value, str) and value:
            # Google clients normalise names to "models/<name>"
            return value.removeprefix("models/")
    return None


def get_self_reported_provider(client: Any) -> Provider | None:
    """Provider a client claims to be, from its LangChain type."""
    if isinstance(client, ClassifiedChatModel):
        return client.provider
    try:
        llm_type = client._llm_type
    except AttributeError:
        return None
    return _LLM_TYPE_TO_PROVIDER.get(llm_type) if isinstance(llm_type, str) else None


class ProviderClientFactory:
    """Build provider clients and remember which provider built each one."""

    def __init__(
        self,
        identities: ProviderIdentityRegistry,
        key_vault: ProviderKeyVault | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._identities = identities
        self._key_vault = key_vault or ProviderKeyVault(self._settings)

    @property
    def identities(self) -> ProviderIdentityRegistry:
        return self._identities

    def build_client(self, config: ModelLoadConfig, caller_config: CallerConfig) -> BuiltModel:
        """Construct an invocable client for ``config``.

        Raises:
            ConfigurationError: If the decryption secret or caller login is missing
            MissingCredentialError: If the caller has no usable key for the provider
        """
        provider = config.provider
        model_name = config.model_name

        final_max_tokens = config.token_budget or DEFAULT_MAX_TOKENS
        if "claude-3-5-haiku" in model_name:
            final_max_tokens = min(final_max_tokens, CLAUDE_3_5_HAIKU_MAX_TOKENS)

        if provider is Provider.OPENROUTER:
            client: BaseChatModel = self._build_openrouter(config, caller_config, final_max_tokens)
        else:
            capability = get_capability(provider)
            base_url = self._resolve_base_url(provider, caller_config)
            kwargs = self._client_kwargs(capability, config, final_max_tokens)

            api_key = self._key_vault.resolve_user_key(caller_config, provider)
            api_key = api_key or self._platform_key(capability)
            if api_key:
                kwargs[capability.api_key_param] = api_key
            if base_url and capability.base_url_param:
                kwargs[capability.base_url_param] = base_url

            logger.info(
                "Initializing model %s (provider=%s, transport=%s, base_url=%s)",
                model_name,
                provider,
                capability.transport,
                base_url,
            )
            client = ClassifiedChatModel(
                client=self._instantiate(capability, kwargs),
                provider=provider,
                model_name=model_name,
            )

        self._identities.record(config.model_key, provider)
        return BuiltModel(client=client, model_key=config.model_key)

    def _client_kwargs(
        self,
        capability: ProviderCapability,
        config: ModelLoadConfig,
        final_max_tokens: int,
    ) -> dict[str, Any]:
        """Token, temperature and thinking arguments for the SDK constructor."""
        kwargs: dict[str, Any] = {
            "model": config.model_name,
            "max_retries": MAX_RETRIES,
        }

        if config.thinking_model and capability.supports_thinking_budget:
            budget = config.thinking_budget_tokens or THINKING_BUDGET_TOKENS
            kwargs["thinking"] = {"type": "enabled", "budget_tokens": budget}
            kwargs[capability.token_param] = budget * ANTHROPIC_THINKING_TOKEN_MULTIPLIER
        elif is_gpt5_family(config.model_name):
            kwargs["max_completion_tokens"] = final_max_tokens
            kwargs["temperature"] = 1
        else:
            kwargs[capability.token_param] = final_max_tokens
            if not config.thinking_model and config.temperature is not None:
                kwargs["temperature"] = config.temperature

        return kwargs

    def _resolve_base_url(self, provider: Provider, caller_config: CallerConfig) -> str | None:
        use_international = caller_config.qwen_use_international
        if use_international is None:
            use_international = self._settings.qwen_use_international
        return get_provider_base_url(provider, use_international=use_international)

    def _platform_key(self, capability: ProviderCapability) -> str | None:
        secret = getattr(self._settings, capability.platform_key_setting, None)
        if secret is None:
            return None
        return secret.get_secret_value() or None

    def _build_openrouter(
        self,
        config: ModelLoadConfig,
        caller_config: CallerConfig,
        final_max_tokens: int,
    ) -> ChatOpenRouter:
        keys = self._key_vault.resolve_openrouter_keys(caller_config)
        if keys is None:
            keys = self._settings.openrouter_key_pool()
        if not keys:
            raise MissingCredentialError(
                "No OpenRouter API keys provided.", provider=Provider.OPENROUTER
            )

        logger.info(
            "Initializing OpenRouter model %s with %d key(s)", config.model_name, len(keys)
        )
        return ChatOpenRouter(
            model_name=config.model_name,
            temperature=config.temperature if config.temperature is not None else 0,
            max_tokens=final_max_tokens,
            api_keys=keys,
            base_url=self._settings.openrouter_base_url,
            request_timeout=self._settings.openrouter_timeout_seconds,
            default_headers={
                "HTTP-Referer": self._settings.openrouter_referer,
                "X-Title": self._settings.openrouter_title,
            },
        )

    @staticmethod
    def _instantiate(capability: ProviderCapability, kwargs: dict[str, Any]) -> BaseChatModel:
        """Create the SDK client for a transport (imports are provider-local)."""
        if capability.transport == "anthropic":
            from langchain_anthropic import ChatAnthropic

            return ChatAnthropic(**kwargs)

        if capability.transport == "google-genai":
            from langchain_google_genai import ChatGoogleGenerativeAI

            return ChatGoogleGenerativeAI(**kwargs)

        if capability.transport == "deepseek":
            from langchain_deepseek import ChatDeepSeek

            return ChatDeepSeek(**kwargs)

        from langchain_openai import ChatOpenAI

        return ChatOpenAI(**kwargs)

    def get_original_provider(self, selected: BuiltModel | Any) -> Provider | None:
        """True provider of a selected model.

        Checks the identity record for the handle first, then the client's
        base URL, then whatever the client reports about itself.
        """
        client = selected
        if isinstance(selected, BuiltModel):
            stored = self._identities.get(selected.model_key)
            if stored is not None:
                return stored
            client = selected.client

        inferred = infer_provider_from_base_url(get_client_base_url(client))
        if inferred is not None:
            return inferred
        return get_self_reported_provider(client)
