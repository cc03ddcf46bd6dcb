"""Core helpers: exceptions and logging setup."""
