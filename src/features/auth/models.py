"""Authentication value objects returned by the service layer."""

from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum


@dataclass(frozen=True, slots=True)
class TokenPair:
    """Access and refresh token issued together on sign-in."""

    access_token: str
    refresh_token: str


class ConfirmOutcome(StrEnum):
    """Terminal outcomes of a verification code confirmation."""

    CONFIRMED = "confirmed"
    INCORRECT = "incorrect"
    EXPIRED = "expired"


@dataclass(frozen=True, slots=True)
class ConfirmCodeResult:
    """Result of confirming a verification code.

    EXPIRED and INCORRECT are expected user-facing states, not errors.
    """

    outcome: ConfirmOutcome
    message: str

    @property
    def success(self) -> bool:
        return self.outcome is ConfirmOutcome.CONFIRMED

    @classmethod
    def confirmed(cls) -> "ConfirmCodeResult":
        return cls(ConfirmOutcome.CONFIRMED, "Code confirmed")

    @classmethod
    def incorrect(cls) -> "ConfirmCodeResult":
        return cls(ConfirmOutcome.INCORRECT, "Incorrect code")

    @classmethod
    def expired(cls) -> "ConfirmCodeResult":
        return cls(ConfirmOutcome.EXPIRED, "Code expired")


@dataclass(frozen=True, slots=True)
class VerifyEmailResult:
    """Result of dispatching a verification code."""

    status: str
    code_ttl: timedelta
