"""CLI subcommands for depbump."""
