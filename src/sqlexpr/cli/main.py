"""sqlexpr CLI entry point."""

import logging

import click

from sqlexpr.config import EngineConfig


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Parse and evaluate SQL-like boolean expressions."""
    config = EngineConfig.from_env()
    level = logging.DEBUG if verbose else config.level
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("sqlexpr").setLevel(level)
    ctx.obj = config


# Register subcommands
from sqlexpr.cli.expr_cmd import check, eval_cmd, parse_cmd  # noqa: E402

cli.add_command(parse_cmd)
cli.add_command(eval_cmd)
cli.add_command(check)
