"""Command-line tools for pygrowattspf."""
