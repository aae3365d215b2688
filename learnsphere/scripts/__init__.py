"""Command line helpers installed as console scripts (see pyproject.toml)."""
