"""Parsing and URL utilities."""
