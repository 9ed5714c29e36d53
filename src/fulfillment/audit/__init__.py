"""Audit sink adapter registry."""

import os

_audit_instance = None


def get_audit_sink():
    """Return the configured audit sink (singleton).

    Uses FakeAuditSink by default; select another with the AUDIT_ADAPTER
    environment variable.
    """
    global _audit_instance
    if _audit_instance is None:
        adapter = os.environ.get("AUDIT_ADAPTER", "fake")
        if adapter == "fake":
            from fulfillment.audit.fake_adapter import FakeAuditSink

            _audit_instance = FakeAuditSink()
        elif adapter == "log":
            from fulfillment.audit.log_adapter import LogAuditSink

            _audit_instance = LogAuditSink()
        else:
            raise ValueError(f"Unknown audit adapter: {adapter}")
    return _audit_instance


def set_audit_sink(adapter) -> None:
    global _audit_instance
    _audit_instance = adapter


def reset_audit_sink():
    """Reset the audit sink singleton (useful for testing)."""
    global _audit_instance
    _audit_instance = None
