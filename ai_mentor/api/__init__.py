"""HTTP and WebSocket surface of the mentor pipeline."""
