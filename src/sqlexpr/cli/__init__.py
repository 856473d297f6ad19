"""sqlexpr command-line interface."""
