"""
Emergency Operations backend.

Incident triage and status workflow for the emergency dashboard: the
transition authority, ranking and filters, the audit/notification sink,
the role gate, and the report store behind a FastAPI REST layer.
"""

__version__ = "1.0.0"
