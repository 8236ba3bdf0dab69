"""LLM tasks and their built-in model defaults.

A task is the role an LLM call plays inside the agent. Each task has a
default ``provider:model`` string and temperature, used whenever the
caller's configuration does not override them.
"""

from dataclasses import dataclass
from enum import StrEnum


class LLMTask(StrEnum):
    """Abstract role of an LLM call."""

    PLANNER = "planner"
    PROGRAMMER = "programmer"
    REVIEWER = "reviewer"
    ROUTER = "router"
    SUMMARIZER = "summarizer"


@dataclass(frozen=True)
class TaskDefaults:
    model_name: str
    temperature: float = 0


TASK_TO_CONFIG_DEFAULTS: dict[LLMTask, TaskDefaults] = {
    LLMTask.PLANNER: TaskDefaults("anthropic:claude-sonnet-4-0"),
    LLMTask.PROGRAMMER: TaskDefaults("anthropic:claude-sonnet-4-0"),
    LLMTask.REVIEWER: TaskDefaults("anthropic:claude-sonnet-4-0"),
    LLMTask.ROUTER: TaskDefaults("anthropic:claude-3-5-haiku-latest"),
    LLMTask.SUMMARIZER: TaskDefaults("anthropic:claude-sonnet-4-0"),
}
