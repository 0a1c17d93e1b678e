"""HTTP API for dfood."""
