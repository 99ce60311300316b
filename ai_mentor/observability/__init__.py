"""Logging, correlation ids, request middleware and the prompt registry."""
