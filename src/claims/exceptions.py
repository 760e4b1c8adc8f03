"""Claims domain errors, mapped to HTTP responses in src/api/main.py."""


class ResourceNotFoundError(Exception):
    """Raised when a claim (or other resource) does not exist. Maps to 404."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PolicyValidationError(Exception):
    """Raised when the policy named on a claim cannot be validated for the claimant. Maps to 400."""

    def __init__(self, message: str = "Invalid policy number or email") -> None:
        super().__init__(message)
        self.message = message
