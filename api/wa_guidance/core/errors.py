"""
Error taxonomy for the guidance chat service.

Callers can tell "fix your input" (InvalidInputError) apart from
"retry the call" (ProviderError, ProviderResponseError).
"""


class GuidanceServiceError(Exception):
    """Base class for every error raised by this package."""


class CredentialMissingError(GuidanceServiceError):
    """Raised at construction when no OpenAI API key is available."""

    def __init__(self) -> None:
        super().__init__(
            "OpenAI API key is required. Provide it via settings or OPENAI_API_KEY env var."
        )


class InvalidInputError(GuidanceServiceError):
    """The caller supplied a topic or messages that cannot be used."""


class InvalidTopicError(InvalidInputError):
    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid or missing topic: {value!r}")


class MalformedMessageError(InvalidInputError):
    pass


class InvalidMessageShapeError(InvalidInputError):
    pass


class EmptyConversationError(InvalidInputError):
    def __init__(self) -> None:
        super().__init__("At least one message is required")


class DocumentUnavailableError(GuidanceServiceError):
    """A guidance document could not be read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load guidance file: {path}. Error: {reason}")


class ProviderError(GuidanceServiceError):
    """Transport, auth, rate-limit or server-side failure from the provider."""


class ProviderResponseError(GuidanceServiceError):
    """The provider answered, but the reply is unusable."""


class EmptyProviderResponseError(ProviderResponseError):
    def __init__(self) -> None:
        super().__init__("No response received from the provider")


class MalformedProviderResponseError(ProviderResponseError):
    def __init__(self) -> None:
        super().__init__("Provider returned invalid JSON response")


class MissingAnswerError(ProviderResponseError):
    def __init__(self) -> None:
        super().__init__("Provider response did not contain an answer")
