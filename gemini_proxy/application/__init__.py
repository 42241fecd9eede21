"""Application layer: FastAPI app, routes, services and validators."""
