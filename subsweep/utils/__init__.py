"""Shared utilities: logging, DNS and HTTP capabilities, input validation."""
