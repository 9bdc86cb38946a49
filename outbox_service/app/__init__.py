"""FastAPI application: factory, lifespan, middleware, exception handlers."""
