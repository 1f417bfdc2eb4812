"""Command line interface for the FusionBrain API.

Usage:
    fusionbrain models
    fusionbrain styles
    fusionbrain ready 4 --strict
    fusionbrain generate "A cat on Mars" --model 4 --output-dir output
    fusionbrain status <task-id> --output-dir output
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fusionbrain.client import DEFAULT_SIZE, DEFAULT_STYLE, FusionBrainClient
from fusionbrain.config import FusionBrainConfig, load_config
from fusionbrain.errors import FusionBrainConfigError, FusionBrainError
from fusionbrain.models import Task

logger = logging.getLogger(__name__)
console = Console()

_DEFAULT_CONFIG = "config.yaml"


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # Quiet down httpx unless debugging
    if not verbose:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def _make_client(config: FusionBrainConfig) -> FusionBrainClient:
    return FusionBrainClient(config)


def _run(ctx: click.Context, make_coro: Any) -> Any:
    """Load config, run ``make_coro(client)`` and report failures."""
    try:
        config = load_config(ctx.obj["config"])
        return asyncio.run(_with_client(config, make_coro))
    except FileNotFoundError as exc:
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        sys.exit(1)
    except FusionBrainConfigError as exc:
        console.print(f"[red]Configuration error: {escape(str(exc))}[/red]")
        sys.exit(1)
    except FusionBrainError as exc:
        kind = getattr(exc, "kind", None)
        label = kind.value if kind is not None else "ERROR"
        console.print(f"[red]{label}: {escape(str(exc))}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)


async def _with_client(config: FusionBrainConfig, make_coro: Any) -> Any:
    async with _make_client(config) as client:
        coro: Awaitable[Any] = make_coro(client)
        return await coro


def _save_images(task: Task, output_dir: str | Path) -> list[Path]:
    """Write the task's decoded images as ``<task_id>_<n>.jpg``."""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    saved = []
    for n, image in enumerate(task.decode_images(), start=1):
        path = out / f"{task.id}_{n}.jpg"
        with open(path, "wb") as f:
            f.write(image)
        logger.info("Saved %s (%.1f KB)", path, len(image) / 1024)
        saved.append(path)
    return saved


def _print_task(task: Task) -> None:
    if task.is_success:
        status_str = "[green]DONE[/green]"
    elif task.is_censored:
        status_str = "[red]CENSORED[/red]"
    elif task.status == Task.FAIL:
        status_str = "[red]FAIL[/red]"
    else:
        status_str = f"[yellow]{task.status}[/yellow]"

    console.print(f"Task [cyan]{task.id}[/cyan]: {status_str}")
    if task.error_description:
        console.print(f"  Error: {escape(task.error_description)}")
    if task.generation_time is not None:
        console.print(f"  Generation time: {task.generation_time}")


@click.group()
@click.option("--config", "-c", default=_DEFAULT_CONFIG, help="Path to config.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool) -> None:
    """FusionBrain text-to-image client."""
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    _setup_logging(verbose)


@cli.command("models")
@click.pass_context
def cmd_models(ctx: click.Context) -> None:
    """List available models."""
    models = _run(ctx, lambda client: client.get_models())

    table = Table(title="Models", show_lines=True)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Version", justify="center")
    table.add_column("Type")
    for model in models:
        table.add_row(str(model.id), model.name, str(model.version), model.type)
    console.print(table)


@cli.command("styles")
@click.pass_context
def cmd_styles(ctx: click.Context) -> None:
    """List available styles."""
    styles = _run(ctx, lambda client: client.get_styles())

    table = Table(title="Styles", show_lines=True)
    table.add_column("Name", style="cyan")
    table.add_column("Title")
    table.add_column("Preview", max_width=50)
    for style in styles:
        table.add_row(style.name, style.title_en, style.image)
    console.print(table)


@cli.command("ready")
@click.argument("model_id", type=int)
@click.option("--strict", is_flag=True, help="Fail with the service response if not ready")
@click.pass_context
def cmd_ready(ctx: click.Context, model_id: int, strict: bool) -> None:
    """Check whether MODEL_ID accepts generation requests."""
    ready = _run(ctx, lambda client: client.is_ready(model_id, strict=strict))
    if ready:
        console.print(f"Model {model_id}: [green]READY[/green]")
    else:
        console.print(f"Model {model_id}: [yellow]NOT READY[/yellow]")


async def _generate_and_wait(
    client: FusionBrainClient,
    model_id: int,
    prompt: str,
    poll_interval: float,
    max_wait: float,
    **options: Any,
) -> Task | None:
    outcome = await client.generate(model_id, prompt, **options)
    if not outcome.accepted:
        console.print(f"[red]Rejected:[/red] {escape(outcome.reason)}")
        return None

    task = outcome.task
    console.print(f"Task [cyan]{task.id}[/cyan] accepted ({task.status})")
    elapsed = 0.0
    while not task.is_finished:
        if elapsed >= max_wait:
            console.print(
                f"[yellow]Task {task.id} did not finish within {max_wait:.0f}s. "
                f"Last status: {task.status}[/yellow]"
            )
            return None
        await asyncio.sleep(poll_interval)
        elapsed += poll_interval
        task = await client.check_task(task.id)
        logger.debug("Task %s: status=%s (%.0fs elapsed)", task.id, task.status, elapsed)
    return task


@cli.command("generate")
@click.argument("prompt")
@click.option("--model", "-m", "model_id", type=int, required=True, help="Model id (see 'models')")
@click.option("--style", "-s", default=DEFAULT_STYLE, show_default=True, help="Style name (see 'styles')")
@click.option("--negative", "-n", default="", help="Negative prompt")
@click.option("--width", type=int, default=DEFAULT_SIZE, show_default=True)
@click.option("--height", type=int, default=DEFAULT_SIZE, show_default=True)
@click.option("--output-dir", "-o", default="output", show_default=True, help="Where to save images")
@click.option("--poll-interval", type=float, default=5.0, show_default=True, help="Seconds between polls")
@click.option("--max-wait", type=float, default=300.0, show_default=True, help="Give up after this many seconds")
@click.pass_context
def cmd_generate(
    ctx: click.Context,
    prompt: str,
    model_id: int,
    style: str,
    negative: str,
    width: int,
    height: int,
    output_dir: str,
    poll_interval: float,
    max_wait: float,
) -> None:
    """Generate an image for PROMPT and save it."""
    task = _run(
        ctx,
        lambda client: _generate_and_wait(
            client,
            model_id,
            prompt,
            poll_interval,
            max_wait,
            style=style,
            negative_prompt=negative,
            width=width,
            height=height,
        ),
    )
    if task is None:
        sys.exit(1)

    _print_task(task)
    if not task.is_success:
        sys.exit(1)
    for path in _save_images(task, output_dir):
        console.print(f"  Saved: {path}")


@cli.command("status")
@click.argument("task_id")
@click.option("--output-dir", "-o", default=None, help="Save images here if the task succeeded")
@click.pass_context
def cmd_status(ctx: click.Context, task_id: str, output_dir: str | None) -> None:
    """Poll TASK_ID once. Finished tasks can only be fetched once."""
    task = _run(ctx, lambda client: client.check_task(task_id))
    _print_task(task)
    if output_dir and task.is_success:
        for path in _save_images(task, output_dir):
            console.print(f"  Saved: {path}")


if __name__ == "__main__":
    cli()
