"""Boundary adapters: relational store and vector search."""
