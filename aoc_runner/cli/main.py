#!/usr/bin/env python3
"""Command line entry point: trust, token, run and set-solution."""

from __future__ import annotations
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from ..api import AocClient
from ..core.config import Config, load_config, save_config
from ..core.env import load_env, session_token
from ..discovery import discover_solutions, find_trusted_root
from ..errors import AocError, MissingTokenError, RunFailedError, UntrustedDirectoryError
from ..orchestrator import Orchestrator, RunReport
from ..progress import PuzzlePart
from ..script_host import LoadReport, ScriptHost
from .display import Prompter, console, progress_bar, render_outcome, render_summary, setup_logging

app = typer.Typer(help="Run, check and submit Advent of Code solutions.", no_args_is_help=True)
logger = logging.getLogger("aoc_runner")


@app.callback()
def main(
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More output (-vv for log origins)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
):
    setup_logging(verbose, quiet)
    seen = load_env()
    logger.debug("Environment keys detected: %s", seen)


@app.command()
def trust(directory: Path = typer.Argument(..., help="The directory to trust")):
    """Trusts a directory to contain solutions."""
    config = load_config()
    directory = directory.resolve(strict=True)
    if directory in config.trusted_dirs:
        logger.info("%s is already trusted", directory)
        return
    if not typer.confirm(f"Are you sure you want to trust {directory}?"):
        return
    config.trusted_dirs.append(directory)
    save_config(config)
    logger.info("Successfully trusted %s!", directory)


@app.command()
def token():
    """Sets the session token used for submitting solutions and fetching inputs."""
    config = load_config()
    config.token = typer.prompt("Enter your session token", hide_input=True)
    save_config(config)
    logger.info("Token saved!")


@app.command("set-solution")
def set_solution(
    year: int = typer.Argument(..., help="Event year"),
    day: int = typer.Argument(..., help="Day of the event"),
    part: int = typer.Argument(..., min=1, max=2, help="Part 1 or 2"),
    answer: Optional[str] = typer.Argument(None, help="Known answer; omit to reset the part"),
):
    """Marks a part as solved with a known answer, or resets it."""
    config = load_config()
    key = PuzzlePart(year, day, part)
    try:
        if answer is None:
            config.progress.reset(key)
        else:
            config.progress.set_solution(key, answer)
    except AocError as e:
        logger.warning("%s", e)
        raise typer.Exit(1)
    save_config(config)
    logger.info("Successfully set solution")


def _load_solutions(host: ScriptHost, root: Path) -> LoadReport:
    files = discover_solutions(root)
    with progress_bar() as prog:
        task = prog.add_task("Importing", total=len(files))
        report = host.load(files, on_loaded=lambda _: prog.advance(task))
    logger.debug("Registered %d solutions from %d files", report.handles, len(report.loaded))
    return report


async def _run(
    config: Config,
    host: ScriptHost,
    load_report: LoadReport,
    token: str,
    year: Optional[int],
    day: Optional[int],
    part: Optional[int],
    submit: bool,
    disable_submit_safety: bool,
    yes: bool,
) -> RunReport:
    selected = len(host.registry.select(year, day, part))
    async with AocClient(token) as client:
        with progress_bar() as prog:
            task = prog.add_task("Running", total=selected)

            def on_outcome(outcome):
                render_outcome(outcome)
                prog.advance(task)

            orchestrator = Orchestrator(
                host,
                fetcher=client,
                submitter=client,
                store=config.progress,
                inputs=config.inputs,
                confirm=Prompter(prog, assume_yes=yes),
                on_outcome=on_outcome,
                load_report=load_report,
            )
            try:
                return await orchestrator.run(year, day, part, submit, disable_submit_safety)
            finally:
                config.add_inputs(orchestrator.cache.new_inputs)


@app.command()
def run(
    year: Optional[int] = typer.Argument(None, help="Only run solutions for the given year"),
    day: Optional[int] = typer.Argument(None, help="Only run solutions for the given day"),
    part: Optional[int] = typer.Argument(None, min=1, max=2, help="Only run the given part"),
    submit: bool = typer.Option(False, "--submit", help="Submit solutions"),
    disable_submit_safety: bool = typer.Option(
        False, "--disable-submit-safety", help="Submit known incorrect solutions"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask before submitting"),
):
    """Runs all matching solutions, optionally submitting the answers."""
    config = load_config()
    cwd = Path.cwd()
    try:
        if find_trusted_root(cwd, config.trusted_dirs) is None:
            raise UntrustedDirectoryError(
                "Current directory is not trusted. Use `aoc trust <dir>` to trust the current directory."
            )
        token = session_token(config.token)
        if not token:
            raise MissingTokenError("No token set. Use `aoc token` to set your session token.")

        with ScriptHost() as host:
            load_report = _load_solutions(host, cwd)
            try:
                report = asyncio.run(_run(
                    config, host, load_report, token, year, day, part,
                    submit, disable_submit_safety, yes,
                ))
            finally:
                save_config(config)
    except RunFailedError as e:
        render_summary(e.report)
        logger.error("%s", e)
        raise typer.Exit(1)
    except AocError as e:
        logger.error("%s", e)
        raise typer.Exit(1)

    if not report.outcomes:
        console.print("[yellow]No solutions matched.[/]")
    render_summary(report)


def cli():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    cli()
