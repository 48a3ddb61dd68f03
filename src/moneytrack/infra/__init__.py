"""Persistence infrastructure: engine, sessions and SQLModel repositories."""
