"""Command plugins: the built-in daemon commands and the sticky/stage commands."""
