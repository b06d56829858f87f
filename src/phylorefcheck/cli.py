from __future__ import annotations

import sys
from importlib import metadata
from pathlib import Path
from typing import List, Optional

import orjson
import typer
from rich.console import Console

from .config import Settings, load_settings
from .errors import ConfigurationError, InputError
from .graph.fixture import load_fixture
from .log import configure_logging
from .orchestrator.resolve import error_payload, resolution_payload, resolve_all
from .orchestrator.runner import run_tests
from .report.aggregator import emit, render_tap
from .utils import write_text

app = typer.Typer(help="Test whether phyloreferences resolve to their expected nodes.")
err_console = Console(stderr=True, highlight=False, emoji=False, soft_wrap=True)

INPUT_ARGUMENT = typer.Argument(..., help="Pre-reasoned fixture (JSON), or '-' for stdin.")
CONFIG_OPTION = typer.Option(None, "--config", exists=True, dir_okay=False)
URI_PREFIX_OPTION = typer.Option(None, "--uri-prefix")
KEEP_PREFIX_OPTION = typer.Option(False, "--keep-prefix", help="Report full node IRIs.")
LANG_OPTION = typer.Option(None, "--lang", help="Preferred label language (repeatable).")
WORKERS_OPTION = typer.Option(None, "--workers", min=1)
TAP_OUT_OPTION = typer.Option(None, "--tap-out", dir_okay=False)
ERRORS_AS_JSON_OPTION = typer.Option(
    False,
    "--errors-as-json",
    help="Report errors as JSON on stdout instead of on stderr.",
)
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v")


@app.callback()
def main() -> None:
    pass


def _settings(
    config: Optional[Path],
    uri_prefix: Optional[str],
    keep_prefix: bool,
    langs: Optional[List[str]],
    workers: Optional[int],
    verbose: bool,
) -> Settings:
    settings = load_settings(config)
    if uri_prefix is not None:
        settings = settings.model_copy(update={"uri_prefix": uri_prefix})
    if keep_prefix:
        settings = settings.model_copy(update={"strip_uri_prefix": False})
    if langs:
        settings = settings.model_copy(update={"preferred_langs": list(langs)})
    if workers is not None:
        settings = settings.model_copy(update={"workers": workers})
    if verbose:
        settings = settings.model_copy(update={"log_level": "INFO"})
    configure_logging(level=settings.log_level.upper())
    return settings


def _input_path(value: str) -> Optional[Path]:
    return None if value == "-" else Path(value)


@app.command("test")
def check_cmd(
    input_file: str = INPUT_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    uri_prefix: Optional[str] = URI_PREFIX_OPTION,
    keep_prefix: bool = KEEP_PREFIX_OPTION,
    langs: Optional[List[str]] = LANG_OPTION,
    workers: Optional[int] = WORKERS_OPTION,
    tap_out: Optional[Path] = TAP_OUT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Test each phyloreference and report the results as TAP."""
    err_console.print(f"Input: {input_file}", markup=False)
    try:
        settings = _settings(config, uri_prefix, keep_prefix, langs, workers, verbose)
        graph = load_fixture(_input_path(input_file))
        report = run_tests(graph, graph, settings, source=input_file)
    except InputError as exc:
        err_console.print(str(exc), markup=False)
        raise typer.Exit(code=1) from exc
    except ConfigurationError as exc:
        err_console.print(f"Aborting, no results reported: {exc}", markup=False)
        raise typer.Exit(code=1) from exc

    if tap_out is not None:
        write_text(tap_out, render_tap(report))
    raise typer.Exit(code=emit(report, sys.stdout, sys.stderr))


@app.command("resolve")
def resolve_cmd(
    input_file: str = INPUT_ARGUMENT,
    config: Optional[Path] = CONFIG_OPTION,
    uri_prefix: Optional[str] = URI_PREFIX_OPTION,
    keep_prefix: bool = KEEP_PREFIX_OPTION,
    errors_as_json: bool = ERRORS_AS_JSON_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Report the nodes each phyloreference resolves to, as JSON."""
    try:
        settings = _settings(config, uri_prefix, keep_prefix, None, None, verbose)
        graph = load_fixture(_input_path(input_file))
        payload = resolution_payload(resolve_all(graph, graph, settings))
    except (InputError, ConfigurationError) as exc:
        if errors_as_json:
            payload = error_payload(f"Could not read and load input ({type(exc).__name__})", exc)
        else:
            err_console.print(str(exc), markup=False)
            raise typer.Exit(code=1) from exc
    typer.echo(orjson.dumps(payload, option=orjson.OPT_SORT_KEYS).decode("utf-8"))


@app.command("version")
def version_cmd() -> None:
    try:
        version = metadata.version("phylorefcheck")
    except metadata.PackageNotFoundError:
        version = "unknown"
    typer.echo(f"phylorefcheck/{version}")


if __name__ == "__main__":
    app()
