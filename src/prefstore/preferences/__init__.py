"""
prefstore.preferences

Preference resolution core.

Responsibilities:
- Dotted-path parsing and nested JSON navigation.
- Read-only default tree access.
- Resolution engine that back-fills missing defaults into storage.
"""

# Package marker; import from submodules directly.


# --- Module Notes -----------------------------------------------------------
# Nothing in this package imports SQLAlchemy or FastAPI; storage is reached only
# through the `PreferenceRecordStore` protocol.
