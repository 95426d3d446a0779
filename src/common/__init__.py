"""Shared helpers: HTTP, logging, error types and host facts."""
