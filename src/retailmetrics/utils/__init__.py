"""Utility modules for retailmetrics."""
