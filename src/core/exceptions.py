class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class InvalidGoalError(DomainError):
    """Exception raised when a generation request carries no usable goal text."""

    pass


class BlueprintNotFoundError(DomainError):
    """Exception raised when a saved blueprint is not found for the caller."""

    pass


class UsageLimitExceededError(DomainError):
    """Exception raised when a caller has exhausted the daily generation quota."""

    def __init__(self, usage_count: int, limit: int) -> None:
        super().__init__(f"Daily limit reached ({usage_count}/{limit})")
        self.usage_count = usage_count
        self.limit = limit


class DeviceBlockedError(DomainError):
    """Exception raised when a device fingerprint is flagged for abuse."""

    pass
