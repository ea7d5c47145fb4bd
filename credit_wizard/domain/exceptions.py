"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InputValidationError(DomainException):
    """Financial input is non-numeric or negative"""

    pass


class ExportError(DomainException):
    """Summary document could not be rendered to PDF"""

    pass


class DeliveryError(DomainException):
    """Mail transport rejected or failed to send the assessment"""

    pass


class InvalidTransitionError(DomainException):
    """Submission does not match the assessment's current step"""

    def __init__(self, current_step: str, attempted_step: str):
        self.current_step = current_step
        self.attempted_step = attempted_step
        super().__init__(
            f"Cannot submit '{attempted_step}' while assessment is at '{current_step}'"
        )


class SessionNotFoundError(DomainException):
    """No active assessment session with the given id"""

    pass
