"""
Shared command-layer plumbing.

Commands are the single point where business operations happen.
Views call commands; commands enforce rules and write models.

Pattern:
1. Validate role / project scope (raise PermissionDenied)
2. Validate input and preconditions (return CommandResult.fail)
3. Lock and re-read the rows being changed, re-check their state
4. Perform the writes inside one transaction
5. Return CommandResult.ok

Failures returned as CommandResult happen before the first write, so
the surrounding transaction.atomic never commits a partial change.
"""

from rest_framework import status


class ErrorCode:
    INVALID = "invalid"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


HTTP_STATUS = {
    ErrorCode.INVALID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
}


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = reject_note(actor, note_id)
        if result.success:
            note = result.data
        else:
            message, code = result.error, result.code
    """

    def __init__(self, success: bool, data=None, error: str = None, code: str = None):
        self.success = success
        self.data = data
        self.error = error
        self.code = code

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, code: str = ErrorCode.INVALID):
        return cls(success=False, error=error, code=code)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.code, status.HTTP_400_BAD_REQUEST)

    def error_body(self) -> dict:
        return {"detail": self.error, "code": self.code}

    def __repr__(self):
        if self.success:
            return f"CommandResult.ok({self.data!r})"
        return f"CommandResult.fail({self.error!r}, code={self.code!r})"
