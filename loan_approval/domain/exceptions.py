"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class MissingApplicationError(DomainException):
    """No loan application available; caller must redirect to the start of the flow"""

    pass


class ValidationError(DomainException):
    """Local validation failure; recovered without a state transition"""

    pass


class InvalidApplicationError(ValidationError):
    """Application record holds values the decision cannot be derived from"""

    pass


class SelectionRequiredError(ValidationError):
    """Confirmation attempted before an installment option was selected"""

    pass


class UnsupportedTenorError(ValidationError):
    """Tenor is not one of the offered installment counts"""

    def __init__(self, tenor_months: int):
        super().__init__(f"Unsupported tenor: {tenor_months} months")
        self.tenor_months = tenor_months


class WorkflowStateError(DomainException):
    """Operation is not valid in the current workflow state"""

    pass


class SubmissionInProgressError(WorkflowStateError):
    """An approval submission is already in flight"""

    pass


class SubmissionError(DomainException):
    """Application store rejected or failed the approval update"""

    pass


class ApplicationStoreError(DomainException):
    """Application store is unreachable or returned invalid data"""

    pass
