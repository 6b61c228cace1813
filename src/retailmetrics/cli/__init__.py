"""CLI package for retailmetrics."""
