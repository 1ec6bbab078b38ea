"""HTTP/WebSocket surface over the log reducer."""
