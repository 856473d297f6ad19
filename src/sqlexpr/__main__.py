from sqlexpr.cli.main import cli

cli(prog_name="sqlexpr")
