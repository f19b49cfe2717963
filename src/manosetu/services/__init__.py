"""Application services: scheduling, lifecycle and video credentials."""
