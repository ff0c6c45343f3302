"""Logging setup and usage metrics."""
