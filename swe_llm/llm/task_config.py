"""Resolve the base invocation config for a task.

Model strings have the form ``provider:[extended-thinking:]modelName``.
Model-family rules applied here are shared with the fallback planner:

- ``extended-thinking:`` marks a thinking model and is stripped
- OpenAI models starting with ``o`` are reasoning (thinking) models
- any ``gpt-5`` model uses ``max_completion_tokens`` and temperature 1
"""

from swe_llm.exceptions import ConfigurationError
from swe_llm.llm.config import (
    DEFAULT_MAX_TOKENS,
    THINKING_BUDGET_TOKENS,
    CallerConfig,
    ModelLoadConfig,
)
from swe_llm.llm.providers import Provider
from swe_llm.llm.tasks import TASK_TO_CONFIG_DEFAULTS, LLMTask

EXTENDED_THINKING_PREFIX = "extended-thinking"


def is_gpt5_family(model_name: str) -> bool:
    return "gpt-5" in model_name


def is_openai_reasoning_model(provider: Provider | str, model_name: str) -> bool:
    return provider == Provider.OPENAI and model_name.startswith("o")


def build_load_config(
    provider: Provider,
    model_name: str,
    *,
    token_budget: int | None,
    temperature: float | None,
    thinking_model: bool = False,
) -> ModelLoadConfig:
    """Assemble a config, placing the token budget in the field its family expects.

    The gpt-5 rule wins over any temperature passed in.
    """
    if is_gpt5_family(model_name):
        fields: dict = {"max_completion_tokens": token_budget, "temperature": 1}
    else:
        fields = {"max_tokens": token_budget, "temperature": temperature}

    if thinking_model:
        fields["thinking_model"] = True
        fields["thinking_budget_tokens"] = THINKING_BUDGET_TOKENS

    return ModelLoadConfig(provider=provider, model_name=model_name, **fields)


def parse_model_string(model_str: str) -> tuple[Provider, str, bool]:
    """Split ``provider:[extended-thinking:]name`` into its parts.

    Returns:
        (provider, model_name, thinking_model)

    Raises:
        ConfigurationError: If the provider prefix is unknown or the name is empty
    """
    provider_str, _, rest = model_str.partition(":")
    try:
        provider = Provider(provider_str)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown provider '{provider_str}' in model string '{model_str}'"
        ) from e

    parts = rest.split(":") if rest else []
    thinking_model = False
    if parts and parts[0] == EXTENDED_THINKING_PREFIX:
        thinking_model = True
        parts = parts[1:]

    model_name = ":".join(parts)
    if not model_name:
        raise ConfigurationError(f"Missing model name in model string '{model_str}'")

    if is_openai_reasoning_model(provider, model_name):
        thinking_model = True

    return provider, model_name, thinking_model


def resolve_base_config(task: LLMTask, caller_config: CallerConfig) -> ModelLoadConfig:
    """Map a task plus the caller's overrides to its base invocation config."""
    task = LLMTask(task)
    defaults = TASK_TO_CONFIG_DEFAULTS[task]

    model_str = caller_config.model_name_for(task) or defaults.model_name
    temperature = caller_config.temperature_for(task)
    if temperature is None:
        temperature = defaults.temperature

    provider, model_name, thinking_model = parse_model_string(model_str)
    token_budget = caller_config.max_tokens or DEFAULT_MAX_TOKENS

    return build_load_config(
        provider,
        model_name,
        token_budget=token_budget,
        temperature=temperature,
        thinking_model=thinking_model,
    )


def get_model_name_for_task(task: LLMTask, caller_config: CallerConfig) -> str:
    """Model name (without provider prefix) the task will run on."""
    return resolve_base_config(task, caller_config).model_name
