"""Identity resolution errors."""

from progress_engine.exceptions import UnauthorizedError


class MissingIdentityError(UnauthorizedError):
    """No user id was supplied by the identity gateway."""

    def __init__(self, header: str) -> None:
        super().__init__(f"Missing {header} header")


class InvalidIdentityError(UnauthorizedError):
    """The supplied user id is not a valid UUID."""

    def __init__(self, header: str) -> None:
        super().__init__(f"Invalid {header} header")


class UnknownAuthProviderError(Exception):
    """AUTH_PROVIDER is set to a value this service does not understand."""

    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"Unknown auth provider: {provider}")
