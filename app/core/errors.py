"""Ledger error kinds.

Every precondition failure is raised before the ledger mutates anything, so a
caller receiving one of these can correct its input and resubmit.
"""


class LedgerError(Exception):
    code = "ledger_error"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = 403


class AlreadyRegistered(LedgerError):
    code = "already_registered"
    status_code = 409


class DuplicateKey(LedgerError):
    code = "duplicate_key"
    status_code = 409


class PredecessorMissing(LedgerError):
    code = "predecessor_missing"
    status_code = 409


class InvalidInput(LedgerError):
    code = "invalid_input"
    status_code = 400


class NotFound(LedgerError):
    code = "not_found"
    status_code = 404


class UnsupportedOperation(LedgerError):
    """Operation is disabled by the deployment's configured policy."""

    code = "unsupported_operation"
    status_code = 409
