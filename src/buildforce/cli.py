"""Buildforce CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from buildforce import __version__

_STOP_WORDS = frozenset({"EXIT", "STOP"})


@click.group()
@click.version_option(version=__version__, prog_name="buildforce")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Buildforce - project memory and session planning for AI coding tools."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _parse_tools(
    _ctx: click.Context, _param: click.Parameter, value: str
) -> list[str]:
    from buildforce.onboarding.scaffold import AI_TOOL_RULES

    tools = [t.strip().lower() for t in value.split(",") if t.strip()]
    unknown = [t for t in tools if t not in AI_TOOL_RULES]
    if unknown:
        msg = f"unknown tool(s) {', '.join(unknown)}; choose from {', '.join(AI_TOOL_RULES)}"
        raise click.BadParameter(msg)
    return tools


def _prompt_openrouter(project_root: Path) -> None:
    """Ask for missing OpenRouter settings and persist them to ``.env``."""
    import os

    from rich.console import Console
    from rich.prompt import Prompt

    from buildforce.config import (
        API_KEY_ENV,
        MODEL_ENV,
        get_openrouter_config,
        has_openrouter_config,
        load_env,
        update_env_file,
    )

    load_env(project_root)
    if has_openrouter_config():
        return

    console = Console()
    current = get_openrouter_config()
    console.print("[bold]OpenRouter settings are needed for `buildforce plan`.[/]")
    api_key = current.api_key or Prompt.ask("OpenRouter API key", console=console)
    model = Prompt.ask("OpenRouter model", default=current.model, console=console)

    env_path = update_env_file(project_root, api_key, model)
    os.environ[API_KEY_ENV] = api_key
    os.environ[MODEL_ENV] = model
    console.print(f"Saved OpenRouter settings to {env_path}")


# ---------------------------------------------------------------------------
# init
# ---------------------------------------------------------------------------


@main.command()
@click.argument("project_name", required=False)
@click.option("--skip-analysis", is_flag=True, help="Write placeholder memory documents.")
@click.option("--force", is_flag=True, help="Overwrite existing buildforce files.")
@click.option(
    "--tools",
    default="cursor",
    show_default=True,
    callback=_parse_tools,
    help="Comma-separated AI tools to set up rules for (cursor, cline, windsurf).",
)
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
def init(
    project_name: str | None,
    *,
    skip_analysis: bool,
    force: bool,
    tools: list[str],
    project: Path | None,
) -> None:
    """Initialize buildforce in a project."""
    from buildforce.analysis.analyzer import ProjectAnalyzer
    from buildforce.analysis.analyzer import project_name as dir_name
    from buildforce.analysis.chunk import ChunkManager
    from buildforce.config import load_analysis_config
    from buildforce.onboarding.doc_generator import InitConfig, InitWorkflow
    from buildforce.onboarding.scaffold import copy_template, is_initialized, setup_ai_tool_rules
    from buildforce.tools.files import FileTools

    project_root = project or Path.cwd()

    if is_initialized(project_root) and not force:
        click.echo("buildforce is already initialized here. Use --force to regenerate.")
        sys.exit(0)

    created = copy_template(project_root, force=force)
    click.echo(f"Created {len(created)} files in {project_root / 'buildforce'}")
    for rel_path in setup_ai_tool_rules(project_root, tools):
        click.echo(f"Rules: {rel_path}")

    _prompt_openrouter(project_root)

    try:
        analysis_config = load_analysis_config(project_root)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    file_tools = FileTools(project_root)
    analyzer = ProjectAnalyzer(ChunkManager(file_tools, analysis_config), file_tools)
    config = InitConfig(
        project_name=project_name or dir_name(project_root),
        root_dir=project_root,
        skip_analysis=skip_analysis,
        force=force,
    )
    result = InitWorkflow(config, analyzer, file_tools).execute()

    for warning in result.warnings:
        click.echo(f"Warning: {warning}")
    if not result.success:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    click.echo("Memory documents written to buildforce/memory/")
    click.echo("Next: run `buildforce plan` to start a session")


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------


@main.command()
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
@click.option("--partition", is_flag=True, help="Analyze one chunk per top-level directory.")
def analyze(*, project: Path | None, output_json: bool, partition: bool) -> None:
    """Analyze the project and print what was found."""
    import dataclasses

    from buildforce.analysis.analyzer import ProjectAnalyzer
    from buildforce.analysis.chunk import ChunkManager
    from buildforce.analysis.types import AnalysisSystemError
    from buildforce.config import load_analysis_config
    from buildforce.tools.files import FileTools

    project_root = project or Path.cwd()

    try:
        analysis_config = load_analysis_config(project_root)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    if partition:
        analysis_config = dataclasses.replace(analysis_config, partition=True)

    file_tools = FileTools(project_root)
    analyzer = ProjectAnalyzer(ChunkManager(file_tools, analysis_config), file_tools)
    try:
        result = analyzer.analyze_project(project_root)
    except AnalysisSystemError as exc:
        click.echo(f"Error: [{exc.kind.value}] {exc.message}", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table

    console = Console()
    console.print(Panel(
        result.description or "(no goals found)",
        title=f"{result.name} ({result.type})",
        border_style="blue",
    ))

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("field", style="cyan")
    table.add_column("value")
    table.add_row("Dependencies", ", ".join(result.dependencies) or "-")
    table.add_row("Patterns", ", ".join(result.frameworks) or "-")
    table.add_row("Build tools", ", ".join(result.build_tools) or "-")
    table.add_row("Test frameworks", ", ".join(result.test_frameworks) or "-")
    table.add_row("Files", str(len(result.structure.files)))
    table.add_row("Directories", str(len(result.structure.directories)))
    console.print(table)


# ---------------------------------------------------------------------------
# plan
# ---------------------------------------------------------------------------


@main.command()
@click.option("--api-key", default=None, help="OpenRouter API key (default: from .env).")
@click.option("--model", default=None, help="OpenRouter model (default: from .env).")
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
def plan(*, api_key: str | None, model: str | None, project: Path | None) -> None:
    """Start a planning session with the agent. Type EXIT or STOP to end it."""
    from rich.console import Console
    from rich.markdown import Markdown

    from buildforce.config import load_config, load_env
    from buildforce.onboarding.scaffold import is_initialized
    from buildforce.planning.agent import LLMError, PlanningAgent, parse_llm_config
    from buildforce.planning.session import create_session

    project_root = project or Path.cwd()

    if not is_initialized(project_root):
        click.echo("Error: buildforce is not initialized. Run `buildforce init` first.", err=True)
        sys.exit(1)

    load_env(project_root)
    try:
        llm_config = parse_llm_config(
            load_config(project_root).get("llm"), api_key=api_key, model=model
        )
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    session_path = create_session(project_root)
    click.echo(f"Session: {session_path.relative_to(project_root)}")

    console = Console()
    agent = PlanningAgent(project_root, llm_config)
    try:
        console.print(Markdown(agent.start()))
        while True:
            text = click.prompt(">", default="", show_default=False, prompt_suffix=" ")
            if text.strip().upper() in _STOP_WORDS:
                break
            if not text.strip():
                continue
            console.print(Markdown(agent.ask(text)))
    except LLMError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Session saved after {agent.turns} exchanges.")
