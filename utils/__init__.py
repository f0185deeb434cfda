"""Logging, configuration and IO helpers."""
