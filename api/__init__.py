"""
Module 10 - Minimal API (FastAPI)

HTTP API for the identity state registry:
- POST /state/transit - Publish a state transition
- GET /gist/... - GIST root, history and proofs
- PUT /requests/{id} - Register proof requests
- POST /requests/{id}/responses - Submit proofs
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
