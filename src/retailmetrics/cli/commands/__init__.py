"""CLI commands for retailmetrics."""
