"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Event / request input
  9xxx: System / upstream services

The price-suggestion engine itself never raises; these errors belong to the
layers around it (input validation and the upstream offer providers).
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Event / input ---

class InvalidEventIdError(AppError):
    def __init__(self, event_id: str) -> None:
        super().__init__(1001, f"Invalid event id: {event_id!r}", 422)


# --- 9xxx: System / upstream ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class OfferProviderError(AppError):
    """Base for failures talking to the upstream offers/events API."""


class OfferProviderUnavailableError(OfferProviderError):
    def __init__(self, detail: str) -> None:
        super().__init__(9101, f"Offer provider unavailable: {detail}", 502)


class OfferProviderResponseError(OfferProviderError):
    def __init__(self, detail: str) -> None:
        super().__init__(9102, f"Malformed offer provider response: {detail}", 502)
