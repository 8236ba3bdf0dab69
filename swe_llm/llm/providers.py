"""Provider capability table.

One record per provider describes how a client for it is built: which
transport class carries the requests, the base URL, which constructor
argument holds the token ceiling, where its credentials live, and the
default model registered for each task. Both the client factory and the
fallback planner read from this table.

Providers:
- openai, anthropic, google-genai: first-party SDK clients
- deepseek: dedicated DeepSeek client with an explicit API base
- moonshot-ai, qwen, z-ai: OpenAI-compatible gateways (ChatOpenAI + base_url)
- openrouter: aggregator with an API key pool (see ``swe_llm.llm.openrouter``)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal

from swe_llm.llm.tasks import LLMTask

Transport = Literal["openai", "anthropic", "google-genai", "deepseek", "openrouter"]


class Provider(StrEnum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE_GENAI = "google-genai"
    OPENROUTER = "openrouter"
    MOONSHOT_AI = "moonshot-ai"
    DEEPSEEK = "deepseek"
    QWEN = "qwen"
    Z_AI = "z-ai"


# Default walk order for fallback candidates
PROVIDER_FALLBACK_ORDER: tuple[Provider, ...] = (
    Provider.OPENAI,
    Provider.ANTHROPIC,
    Provider.GOOGLE_GENAI,
    Provider.OPENROUTER,
    Provider.MOONSHOT_AI,
    Provider.DEEPSEEK,
    Provider.QWEN,
    Provider.Z_AI,
)

QWEN_BASE_URL = "https://dashscope.aliyuncs.com/compatible-mode/v1"
QWEN_INTERNATIONAL_BASE_URL = "https://dashscope-intl.aliyuncs.com/compatible-mode/v1"


def _same_model_for_all_tasks(model_name: str) -> dict[LLMTask, str]:
    return {task: model_name for task in LLMTask}


@dataclass(frozen=True)
class ProviderCapability:
    """How to build and recognise clients for one provider."""

    provider: Provider
    transport: Transport
    api_key_field: str
    platform_key_setting: str
    default_models: dict[LLMTask, str]
    base_url: str | None = None
    # Substrings of the configured base URL that identify this provider
    base_url_markers: tuple[str, ...] = ()
    token_param: str = "max_tokens"
    api_key_param: str = "api_key"
    base_url_param: str | None = None
    supports_thinking_budget: bool = False

    def default_model_for(self, task: LLMTask) -> str | None:
        """Registered default for ``task``; ``None`` when the task is unsupported."""
        return self.default_models.get(task) or None


PROVIDER_CAPABILITIES: dict[Provider, ProviderCapability] = {
    Provider.OPENAI: ProviderCapability(
        provider=Provider.OPENAI,
        transport="openai",
        api_key_field="openai_api_key",
        platform_key_setting="openai_api_key",
        default_models={
            LLMTask.PLANNER: "gpt-5",
            LLMTask.PROGRAMMER: "gpt-5",
            LLMTask.REVIEWER: "gpt-5",
            LLMTask.ROUTER: "gpt-5-nano",
            LLMTask.SUMMARIZER: "gpt-5-mini",
        },
    ),
    Provider.ANTHROPIC: ProviderCapability(
        provider=Provider.ANTHROPIC,
        transport="anthropic",
        api_key_field="anthropic_api_key",
        platform_key_setting="anthropic_api_key",
        default_models={
            LLMTask.PLANNER: "claude-sonnet-4-0",
            LLMTask.PROGRAMMER: "claude-sonnet-4-0",
            LLMTask.REVIEWER: "claude-sonnet-4-0",
            LLMTask.ROUTER: "claude-3-5-haiku-latest",
            LLMTask.SUMMARIZER: "claude-sonnet-4-0",
        },
        supports_thinking_budget=True,
    ),
    Provider.GOOGLE_GENAI: ProviderCapability(
        provider=Provider.GOOGLE_GENAI,
        transport="google-genai",
        api_key_field="google_api_key",
        platform_key_setting="google_api_key",
        default_models={
            LLMTask.PLANNER: "gemini-2.5-flash",
            LLMTask.PROGRAMMER: "gemini-2.5-pro",
            LLMTask.REVIEWER: "gemini-2.5-flash",
            LLMTask.ROUTER: "gemini-2.5-flash",
            LLMTask.SUMMARIZER: "gemini-2.5-pro",
        },
        token_param="max_output_tokens",
        api_key_param="google_api_key",
    ),
    Provider.OPENROUTER: ProviderCapability(
        provider=Provider.OPENROUTER,
        transport="openrouter",
        api_key_field="openrouter",
        platform_key_setting="openrouter_api_keys",
        default_models=_same_model_for_all_tasks("openrouter/anthropic/claude-3-haiku"),
        base_url="https://openrouter.ai/api/v1",
    ),
    Provider.MOONSHOT_AI: ProviderCapability(
        provider=Provider.MOONSHOT_AI,
        transport="openai",
        api_key_field="moonshot_api_key",
        platform_key_setting="moonshot_api_key",
        default_models=_same_model_for_all_tasks("kimi-k2-0711-preview"),
        base_url="https://api.moonshot.cn/v1",
        base_url_markers=("api.moonshot.cn",),
        base_url_param="base_url",
    ),
    Provider.DEEPSEEK: ProviderCapability(
        provider=Provider.DEEPSEEK,
        transport="deepseek",
        api_key_field="deepseek_api_key",
        platform_key_setting="deepseek_api_key",
        default_models={
            LLMTask.PLANNER: "deepseek-reasoner",
            LLMTask.PROGRAMMER: "deepseek-chat",
            LLMTask.REVIEWER: "deepseek-chat",
            LLMTask.ROUTER: "deepseek-chat",
            LLMTask.SUMMARIZER: "deepseek-chat",
        },
        base_url="https://api.deepseek.com/v1",
        base_url_markers=("api.deepseek.com",),
        base_url_param="base_url",
    ),
    Provider.QWEN: ProviderCapability(
        provider=Provider.QWEN,
        transport="openai",
        api_key_field="qwen_api_key",
        platform_key_setting="qwen_api_key",
        default_models={
            LLMTask.PLANNER: "qwen-plus",
            LLMTask.PROGRAMMER: "qwen3-coder-plus",
            LLMTask.REVIEWER: "qwen-plus",
            LLMTask.ROUTER: "qwen-plus",
            LLMTask.SUMMARIZER: "qwen-plus",
        },
        base_url=QWEN_BASE_URL,
        base_url_markers=("dashscope.aliyuncs.com", "dashscope-intl.aliyuncs.com"),
        base_url_param="base_url",
    ),
    # Z.AI has no registered task defaults; it is only used when selected explicitly
    Provider.Z_AI: ProviderCapability(
        provider=Provider.Z_AI,
        transport="openai",
        api_key_field="zai_api_key",
        platform_key_setting="zai_api_key",
        default_models=_same_model_for_all_tasks(""),
        base_url="https://api.z.ai/api/paas/v4/",
        base_url_param="base_url",
    ),
}


def get_capability(provider: Provider | str) -> ProviderCapability:
    """Look up the capability record for a provider."""
    return PROVIDER_CAPABILITIES[Provider(provider)]


def get_provider_base_url(provider: Provider | str, use_international: bool = False) -> str | None:
    """Base URL for OpenAI-compatible and gateway providers.

    Qwen switches to the international DashScope endpoint when
    ``use_international`` is set.
    """
    provider = Provider(provider)
    if provider is Provider.QWEN and use_international:
        return QWEN_INTERNATIONAL_BASE_URL
    return PROVIDER_CAPABILITIES[provider].base_url


def infer_provider_from_base_url(base_url: str | None) -> Provider | None:
    """Recover a gateway provider from a client's configured base URL."""
    if not base_url:
        return None
    for capability in PROVIDER_CAPABILITIES.values():
        if any(marker in base_url for marker in capability.base_url_markers):
            return capability.provider
    return None


def get_default_model_for_provider(provider: Provider | str, task: LLMTask) -> str | None:
    """Default model registered for a provider/task pair, if any."""
    return get_capability(provider).default_model_for(task)


MODEL_OPTIONS: list[dict[str, str]] = [
    {"label": "Claude Sonnet 4", "value": "anthropic:claude-sonnet-4-0"},
    {"label": "Claude Opus 4.1", "value": "anthropic:claude-opus-4-1"},
    {"label": "Claude Opus 4", "value": "anthropic:claude-opus-4-0"},
    {"label": "Claude 3.7 Sonnet", "value": "anthropic:claude-3-7-sonnet-latest"},
    {"label": "Claude 3.5 Sonnet", "value": "anthropic:claude-3-5-sonnet-latest"},
    {"label": "Claude 3.5 Haiku", "value": "anthropic:claude-3-5-haiku-latest"},
    {"label": "GPT 5", "value": "openai:gpt-5"},
    {"label": "GPT 5 mini", "value": "openai:gpt-5-mini"},
    {"label": "GPT 5 nano", "value": "openai:gpt-5-nano"},
    {"label": "o4", "value": "openai:o4"},
    {"label": "o4 mini", "value": "openai:o4-mini"},
    {"label": "o3", "value": "openai:o3"},
    {"label": "o3 mini", "value": "openai:o3-mini"},
    {"label": "GPT 4o", "value": "openai:gpt-4o"},
    {"label": "GPT 4o mini", "value": "openai:gpt-4o-mini"},
    {"label": "GPT 4.1", "value": "openai:gpt-4.1"},
    {"label": "GPT 4.1 mini", "value": "openai:gpt-4.1-mini"},
    {"label": "Gemini 2.5 Pro", "value": "google-genai:gemini-2.5-pro"},
    {"label": "Gemini 2.5 Flash", "value": "google-genai:gemini-2.5-flash"},
    {"label": "Kimi K2 Preview", "value": "moonshot-ai:kimi-k2-0711-preview"},
    {"label": "DeepSeek R1 (Reasoner)", "value": "deepseek:deepseek-reasoner"},
    {"label": "DeepSeek V3 (Chat)", "value": "deepseek:deepseek-chat"},
    {"label": "Qwen Plus", "value": "qwen:qwen-plus"},
    {"label": "Qwen3 Coder Plus", "value": "qwen:qwen3-coder-plus"},
    {"label": "GLM-4.5 (Z.AI)", "value": "z-ai:glm-4.5"},
    {"label": "GLM-4.5-Air (Z.AI)", "value": "z-ai:glm-4.5-air"},
    {"label": "GLM-4.5-Flash (Z.AI)", "value": "z-ai:glm-4.5-flash"},
    {"label": "GLM-4-32B-128K (Z.AI)", "value": "z-ai:glm-4-32b-0414-128k"},
]

# Catalog entries usable where a thinking budget cannot be configured
MODEL_OPTIONS_NO_THINKING: list[dict[str, str]] = [
    option
    for option in MODEL_OPTIONS
    if "extended-thinking" not in option["value"] and not option["value"].startswith("openai:o")
]
