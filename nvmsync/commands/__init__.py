"""CLI subcommands for nvmsync."""
