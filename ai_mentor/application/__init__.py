"""Application layer: per-request orchestration of the mentor pipeline."""
