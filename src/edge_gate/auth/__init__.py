"""
edge_gate.auth

Authentication primitives.

Responsibilities:
- Cookie credential codec and HMAC signature verification (end-user identity).
- Internal bearer JWTs and FastAPI dependencies guarding the directory endpoints.
"""

# Package marker.
