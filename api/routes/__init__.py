"""API route handlers."""

from api.routes import health, history, proofs, requests, state

__all__ = ["health", "history", "proofs", "requests", "state"]
