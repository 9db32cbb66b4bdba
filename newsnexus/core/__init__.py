"""Core infrastructure: configuration, database, auth and errors."""
