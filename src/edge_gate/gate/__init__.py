"""
edge_gate.gate

Request-time authorization gate.

Responsibilities:
- Classify exempt routes.
- Keep a TTL-bounded snapshot of the user directory.
- Decide a verdict per request and revoke the credential on deny.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package touches the database; the directory is read over HTTP
# through `edge_gate.directory_clients`.
