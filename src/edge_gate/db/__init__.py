"""
edge_gate.db

Persistence package.

Responsibilities:
- SQLAlchemy declarative base, models, session factories.
- Repository for user directory records.
"""

# Package marker.
