"""Product service with a transactional outbox for reliable event delivery."""

__version__ = "1.0.0"
