"""Core configuration and logging for dfood."""
