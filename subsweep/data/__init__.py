"""Bundled dictionaries."""
