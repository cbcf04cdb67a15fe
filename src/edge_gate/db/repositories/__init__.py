"""
edge_gate.db.repositories

Repository package.
"""

# Package marker.
