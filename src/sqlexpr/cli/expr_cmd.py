"""Expression CLI commands: parse, eval and check."""

import re
from pathlib import Path
from typing import Any, NoReturn

import click
import yaml

from sqlexpr.errors import EvaluationError, ParseError
from sqlexpr.evaluator import evaluate
from sqlexpr.parser import parse
from sqlexpr.rendering import render
from sqlexpr.types import RuntimeValue


class _BindingsLoader(yaml.SafeLoader):
    """SafeLoader that also reads exponent floats without a dot (``1e3``)."""


# YAML 1.1 only resolves 1.0e+3 style floats; match what the lexer accepts
_BindingsLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(r"^[-+]?(?:[0-9][0-9_]*)?\.?[0-9]+[eE][-+]?[0-9]+$"),
    list("-+0123456789."),
)


def _fail(message: str) -> NoReturn:
    click.echo(click.style(message, fg="red"), err=True)
    raise SystemExit(1)


def _to_runtime(name: str, value: Any) -> RuntimeValue:
    try:
        return RuntimeValue.of(value)
    except (TypeError, ValueError) as e:
        raise click.BadParameter(f"binding '{name}': {e}") from e


def _load_bindings(bindings_file: Path | None, pairs: tuple[str, ...]) -> dict[str, RuntimeValue]:
    """Merge a YAML/JSON bindings file with NAME=VALUE overrides."""
    bindings: dict[str, RuntimeValue] = {}

    if bindings_file is not None:
        with open(bindings_file) as f:
            data = yaml.load(f, Loader=_BindingsLoader)
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise click.BadParameter(
                "bindings file must contain a mapping of names to values",
                param_hint="--bindings",
            )
        for name, value in data.items():
            bindings[str(name)] = _to_runtime(str(name), value)

    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected NAME=VALUE, got '{pair}'", param_hint="--var")
        name = name.strip()
        # VALUE is read as a YAML scalar: 42, 2.5, 1e3, true, null, 'text'
        value = yaml.load(raw, Loader=_BindingsLoader) if raw.strip() else ""
        bindings[name] = _to_runtime(name, value)

    return bindings


@click.command("parse")
@click.argument("expression")
@click.option(
    "--pretty/--no-pretty",
    default=None,
    help="Print an indented tree instead of normalized text (default: SQLEXPR_PRETTY).",
)
@click.pass_obj
def parse_cmd(config, expression: str, pretty: bool | None):
    """Parse EXPRESSION and print its normalized form."""
    try:
        tree = parse(expression)
    except ParseError as e:
        _fail(f"Parse error: {e}")

    click.echo(render(tree, config.pretty if pretty is None else pretty))


@click.command("eval")
@click.argument("expression")
@click.option(
    "--var",
    "pairs",
    multiple=True,
    metavar="NAME=VALUE",
    help="Bind a variable; VALUE is read as a YAML scalar (42, 1e3, true, null, 'text'). May be repeated.",
)
@click.option(
    "--bindings",
    "bindings_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON file mapping variable names to values.",
)
def eval_cmd(expression: str, pairs: tuple[str, ...], bindings_file: Path | None):
    """Evaluate EXPRESSION against variable bindings and print true or false."""
    bindings = _load_bindings(bindings_file, pairs)

    try:
        result = evaluate(expression, bindings)
    except EvaluationError as e:
        _fail(f"{e.kind.value}: {e}")

    click.echo("true" if result else "false")


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def check(file: Path):
    """Validate FILE, one expression per line.

    Blank lines and lines starting with '#' are skipped.
    """
    checked = 0
    failures = 0

    for lineno, line in enumerate(file.read_text().splitlines(), start=1):
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        checked += 1
        try:
            parse(text)
        except ParseError as e:
            failures += 1
            click.echo(
                click.style(f"{file.name}:{lineno}: {e.message} (column {e.column})", fg="red")
            )

    if failures:
        click.echo(
            click.style(
                f"\n{failures} of {checked} expression(s) failed to parse.", fg="red", bold=True
            )
        )
        raise SystemExit(1)

    click.echo(click.style(f"All {checked} expression(s) are valid.", fg="green", bold=True))
