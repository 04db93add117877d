"""Domain exceptions for the commission engine."""


class CommissionError(Exception):
    """Base class for commission engine errors."""


class CommissionConfigurationError(CommissionError):
    """No active rule set exists for an (organization, type) pair."""

    def __init__(self, organization_id, commission_type):
        self.organization_id = organization_id
        self.commission_type = commission_type
        super().__init__(
            f"No active {commission_type} commission rules for organization {organization_id}."
        )


class InvalidRuleSetError(CommissionError, ValueError):
    """A tier list violates the ordering or reward constraints."""


class UnknownMemberError(CommissionError, LookupError):
    """The user has no active organization membership."""

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"User {user_id} is not an active organization member.")
