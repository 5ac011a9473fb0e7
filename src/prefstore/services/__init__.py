"""
prefstore.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Translate validation and persistence failures into result envelopes.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services should be pure Python and easily testable with fake stores/sessions.
