"""Global enums — values match the upstream offers API exactly."""

from enum import Enum


class OfferStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ACCEPTED = "ACCEPTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"
