"""
HTTP API layer: the FastAPI application, its routers and dependency wiring.
"""
