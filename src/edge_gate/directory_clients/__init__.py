"""
edge_gate.directory_clients

Directory client package.

Responsibilities:
- Fetch the authoritative user directory (bulk document or per-user status).
- Normalize upstream field-name and encoding variants into canonical entries.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The snapshot cache depends on this boundary, not on HTTP or routers directly.
