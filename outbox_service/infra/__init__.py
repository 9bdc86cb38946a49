"""Infrastructure adapters: database, messaging, logging and metrics."""
