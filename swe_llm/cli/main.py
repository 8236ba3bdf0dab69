"""CLI entry point.

Provides operator commands for inspecting model selection:
- models: List the model catalog
- resolve: Show the base invocation config for a task
- candidates: Show the ordered fallback candidates for a task
"""

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from swe_llm.exceptions import ConfigurationError
from swe_llm.llm.config import CallerConfig, ModelLoadConfig
from swe_llm.llm.fallback import FallbackPlanner
from swe_llm.llm.factory import ProviderClientFactory, ProviderIdentityRegistry
from swe_llm.llm.providers import MODEL_OPTIONS, MODEL_OPTIONS_NO_THINKING
from swe_llm.llm.task_config import resolve_base_config
from swe_llm.llm.tasks import LLMTask
from swe_llm.logging_config import configure_logging

app = typer.Typer(
    name="swe-llm",
    help="LLM provider selection and fallback planning",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

ModelOption = Annotated[
    Optional[str],  # noqa: UP007
    typer.Option("--model", "-m", help="Override model string, e.g. 'openai:gpt-5'"),
]
MaxTokensOption = Annotated[
    Optional[int],  # noqa: UP007
    typer.Option("--max-tokens", help="Override the token budget"),
]
TemperatureOption = Annotated[
    Optional[float],  # noqa: UP007
    typer.Option("--temperature", "-t", help="Override the task temperature"),
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    configure_logging("DEBUG" if verbose else "WARNING")


def _caller_config(
    task: LLMTask,
    model: str | None,
    max_tokens: int | None,
    temperature: float | None,
) -> CallerConfig:
    overrides: dict = {"max_tokens": max_tokens}
    if model:
        overrides[f"{task.value}_model_name"] = model
    if temperature is not None:
        overrides[f"{task.value}_temperature"] = temperature
    return CallerConfig(**overrides)


def _format(value: object) -> str:
    return "-" if value is None else str(value)


def _config_table(title: str, configs: list[ModelLoadConfig]) -> Table:
    table = Table(title=title, show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Provider", style="cyan")
    table.add_column("Model")
    table.add_column("Temperature", justify="right")
    table.add_column("Max tokens", justify="right")
    table.add_column("Max completion tokens", justify="right")
    table.add_column("Thinking budget", justify="right")

    for i, config in enumerate(configs, start=1):
        table.add_row(
            str(i),
            str(config.provider),
            config.model_name,
            _format(config.temperature),
            _format(config.max_tokens),
            _format(config.max_completion_tokens),
            _format(config.thinking_budget_tokens) if config.thinking_model else "-",
        )
    return table


@app.command()
def models(
    no_thinking: Annotated[
        bool,
        typer.Option("--no-thinking", help="Hide reasoning / extended-thinking models"),
    ] = False,
) -> None:
    """List the selectable models."""
    options = MODEL_OPTIONS_NO_THINKING if no_thinking else MODEL_OPTIONS

    table = Table(title=f"Models ({len(options)})", show_header=True)
    table.add_column("Label")
    table.add_column("Model string", style="cyan")
    for option in options:
        table.add_row(option["label"], option["value"])
    console.print(table)


@app.command()
def resolve(
    task: Annotated[LLMTask, typer.Argument(help="Task to resolve")],
    model: ModelOption = None,
    max_tokens: MaxTokensOption = None,
    temperature: TemperatureOption = None,
) -> None:
    """Show the base invocation config for a task."""
    caller_config = _caller_config(task, model, max_tokens, temperature)
    try:
        config = resolve_base_config(task, caller_config)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    console.print(_config_table(f"Base config: {task.value}", [config]))


@app.command()
def candidates(
    task: Annotated[LLMTask, typer.Argument(help="Task to plan fallbacks for")],
    model: ModelOption = None,
    max_tokens: MaxTokensOption = None,
    temperature: TemperatureOption = None,
) -> None:
    """Show the ordered fallback candidates for a task's configured model."""
    caller_config = _caller_config(task, model, max_tokens, temperature)
    try:
        selected = resolve_base_config(task, caller_config)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    planner = FallbackPlanner(ProviderClientFactory(ProviderIdentityRegistry()))
    configs = planner.build_candidate_list(task, caller_config, selected)
    console.print(_config_table(f"Fallback candidates: {task.value}", configs))


if __name__ == "__main__":
    app()
