"""Pydantic API contracts."""
