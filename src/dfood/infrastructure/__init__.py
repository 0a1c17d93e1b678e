"""Infrastructure layer: auth, persistence and HTTP API."""
