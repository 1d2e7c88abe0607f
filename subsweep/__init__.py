"""SUBSWEEP: concurrent subdomain enumeration by brute force or pattern dictionaries."""

__version__ = "0.1.0"
