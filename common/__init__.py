"""Shared models, credentials, backend adapter and errors."""
