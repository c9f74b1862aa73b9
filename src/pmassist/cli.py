# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import TypeVar

import click

from pmassist.llm import (
    CompletionRequest,
    LLMError,
    LLMManager,
    TemplateRenderError,
    TextDelta,
    UsageReport,
    get_template,
)
from pmassist.llm.prompts import PROMPT_TEMPLATES, TASK_BREAKDOWN
from pmassist.llm.schemas import ProjectAnalysis
from pmassist.logging import configure_logging
from pmassist.settings import Settings

T = TypeVar("T")


def _build_manager(settings: Settings) -> LLMManager:
    return LLMManager(settings.llm)


def _parse_vars(pairs: tuple[str, ...]) -> dict[str, str]:
    variables: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected key=value, got {pair!r}", param_hint="--var")
        variables[key] = value
    return variables


def _system_prompt(template: str | None, system: str | None, variables: dict[str, str], strict: bool) -> str:
    if template is None:
        return system or ""
    try:
        return get_template(template).render(variables, strict=strict)
    except KeyError as e:
        raise click.BadParameter(str(e.args[0]), param_hint="--template") from e
    except TemplateRenderError as e:
        raise click.BadParameter(str(e), param_hint="--var") from e


def _run_with_manager(ctx: click.Context, action: Callable[[LLMManager], Awaitable[T]]) -> T:
    settings: Settings = ctx.obj["settings"]

    async def _run() -> T:
        async with _build_manager(settings) as manager:
            return await action(manager)

    try:
        return asyncio.run(_run())
    except LLMError as e:
        raise click.ClickException(str(e)) from e


prompt_options = [
    click.option("--template", "template", default=None, help="Shipped template used as system prompt."),
    click.option("--system", default=None, help="Literal system prompt (ignored with --template)."),
    click.option("--var", "variables", multiple=True, help="Template variable as key=value (repeatable)."),
    click.option("--strict/--lenient", default=True, show_default=True, help="Fail on unfilled placeholders."),
    click.option("--max-tokens", type=int, default=None),
    click.option("--temperature", type=float, default=None),
]


def with_prompt_options(func):
    for option in reversed(prompt_options):
        func = option(func)
    return func


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.pass_context
def cli(ctx: click.Context) -> None:
    """pmassist command line interface."""
    settings = Settings()
    configure_logging(settings)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command("templates")
def templates() -> None:
    """List shipped prompt templates."""
    for name, template in sorted(PROMPT_TEMPLATES.items()):
        placeholders = ", ".join(sorted(template.placeholders))
        click.echo(f"{name}\t{template.version}\t{placeholders}")


@cli.command("render")
@click.argument("name")
@click.option("--var", "variables", multiple=True, help="Template variable as key=value (repeatable).")
@click.option("--strict/--lenient", default=False, show_default=True, help="Fail on unfilled placeholders.")
def render(name: str, variables: tuple[str, ...], strict: bool) -> None:
    """Render a shipped template to stdout."""
    click.echo(_system_prompt(name, None, _parse_vars(variables), strict))


@cli.command("complete")
@click.argument("message")
@with_prompt_options
@click.option("--json", "as_json", is_flag=True, help="Ask for a JSON-only response.")
@click.pass_context
def complete(
    ctx: click.Context,
    message: str,
    template: str | None,
    system: str | None,
    variables: tuple[str, ...],
    strict: bool,
    max_tokens: int | None,
    temperature: float | None,
    as_json: bool,
) -> None:
    """Run a blocking completion and print the response."""
    request = CompletionRequest(
        system_prompt=_system_prompt(template, system, _parse_vars(variables), strict),
        user_message=message,
        response_format="json" if as_json else "text",
        max_tokens=max_tokens,
        temperature=temperature,
    )
    result = _run_with_manager(ctx, lambda manager: manager.complete(request))
    click.echo(result.content)
    click.echo(
        f"[{result.model}] in={result.usage.input_tokens} out={result.usage.output_tokens} "
        f"latency={result.latency_ms}ms",
        err=True,
    )


@cli.command("stream")
@click.argument("message")
@with_prompt_options
@click.pass_context
def stream(
    ctx: click.Context,
    message: str,
    template: str | None,
    system: str | None,
    variables: tuple[str, ...],
    strict: bool,
    max_tokens: int | None,
    temperature: float | None,
) -> None:
    """Stream a completion to stdout as it is generated."""
    request = CompletionRequest(
        system_prompt=_system_prompt(template, system, _parse_vars(variables), strict),
        user_message=message,
        max_tokens=max_tokens,
        temperature=temperature,
    )

    async def _consume(manager: LLMManager) -> None:
        async for event in manager.stream(request):
            if isinstance(event, TextDelta):
                click.echo(event.text, nl=False)
            elif isinstance(event, UsageReport):
                click.echo("")
                click.echo(
                    f"in={event.usage.input_tokens} out={event.usage.output_tokens}",
                    err=True,
                )

    _run_with_manager(ctx, _consume)


@cli.command("breakdown")
@click.argument("description")
@click.option("--context", "additional_context", default="", help="Additional project context.")
@click.pass_context
def breakdown(ctx: click.Context, description: str, additional_context: str) -> None:
    """Generate a validated task breakdown for a project description."""
    request = CompletionRequest(
        system_prompt=TASK_BREAKDOWN.render(
            {"projectDescription": description, "additionalContext": additional_context},
            strict=True,
        ),
        user_message="Analyze this project and generate a comprehensive task breakdown.",
    )
    result = _run_with_manager(ctx, lambda manager: manager.complete_with_schema(request, ProjectAnalysis))
    click.echo(json.dumps(result.data.model_dump(by_alias=True), indent=2))
    click.echo(
        f"attempts={result.attempts} in={result.usage.input_tokens} out={result.usage.output_tokens}",
        err=True,
    )


if __name__ == "__main__":
    cli(obj={})
