"""API layer: FastAPI routers and middleware."""
