"""Core infrastructure: configuration, persistence, logging and scheduling."""
