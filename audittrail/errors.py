class AuditError(Exception):
    """Base class for failures the audit service reports to its callers."""

    code = "audit_error"


class MalformedInput(AuditError):
    """Request body is not a JSON object (or lacks a required field)."""

    code = "malformed_input"


class StoreUnavailable(AuditError):
    """The backing store could not be read or written."""

    code = "store_unavailable"
