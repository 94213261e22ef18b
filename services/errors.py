class LoanFileError(ValueError):
    """Base class for errors raised by the loan-file services."""


class InvalidInputError(LoanFileError):
    """A caller passed data the services cannot work with (programming or client error)."""


class InvalidLoanContextError(InvalidInputError):
    """Loan context is missing or incomplete."""


class UnknownRequirementError(InvalidInputError):
    """Requirement name is not on the loan's resolved checklist."""

    def __init__(self, names: list[str], funder: str):
        self.names = names
        self.funder = funder
        super().__init__(f"Not a requirement for funder '{funder}': {', '.join(names)}")
