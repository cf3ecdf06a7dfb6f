"""Exceptions raised by the client-side wizard."""


class WizardError(Exception):
    """Base exception for wizard errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class SessionInvalidError(WizardError):
    """Screen entered without a valid session; callers redirect to the entry point."""

    def __init__(self, reason: str, redirect_to: str):
        self.reason = reason
        self.redirect_to = redirect_to
        super().__init__(f"Session invalid: {reason}")


class InvalidAnswerError(WizardError):
    """Answer value outside the screen's choices."""

    def __init__(self, key: str, value):
        self.key = key
        self.value = value
        super().__init__(f"Invalid value for {key}: {value!r}")


class MissingFieldsError(WizardError):
    """Required fields absent at submission time. Raised before any network I/O."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Missing required information: {', '.join(missing)}. "
            "Please complete all steps before submitting."
        )


class SubmissionFailedError(WizardError):
    """The backend did not accept the application (FailurePolicy.RAISE only)."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)
