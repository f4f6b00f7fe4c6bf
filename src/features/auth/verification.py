"""Email ownership proof through one-time numeric codes.

Per-user state machine::

    NoCode --issue--> CodePending --confirm(match)--> Consumed
    CodePending --ttl elapses--> NoCode
    CodePending --confirm(mismatch)--> CodePending
    CodePending --issue--> CodePending (previous code replaced)

Confirmation is read-then-delete with no guard: a confirm racing a reissue
may be judged against either code.
"""

import logging
import secrets
from datetime import timedelta

from .email import EmailSender
from .models import ConfirmCodeResult
from .stores import VerificationCodeStore

logger = logging.getLogger(__name__)

CODE_MIN = 100_000
CODE_MAX = 999_999

VERIFICATION_SUBJECT = "Email Verification Code"


def humanize_ttl(ttl: timedelta) -> str:
    """Render a TTL as e.g. "2 minutes" or "1 hour 30 minutes"."""
    remaining = int(ttl.total_seconds())
    parts = []
    for unit, seconds in (("hour", 3600), ("minute", 60), ("second", 1)):
        amount, remaining = divmod(remaining, seconds)
        if amount:
            parts.append(f"{amount} {unit}{'s' if amount != 1 else ''}")
    return " ".join(parts) or "0 seconds"


class VerificationManager:
    """Issues, delivers and adjudicates verification codes."""

    def __init__(self, codes: VerificationCodeStore, sender: EmailSender, code_ttl: timedelta):
        self.codes = codes
        self.sender = sender
        self.code_ttl = code_ttl

    async def issue_code(self, user_id: int) -> int:
        """Generate and store a fresh code, replacing any pending one."""
        code = CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1)
        await self.codes.save(user_id, code, self.code_ttl)
        logger.info(f"Issued verification code for user {user_id}")
        return code

    async def send_code(self, email: str, code: int) -> None:
        """Deliver a code. On failure the code stays stored."""
        body = f"Your verification code is: {code}\nThis code is valid for {humanize_ttl(self.code_ttl)}."
        await self.sender.send(email, VERIFICATION_SUBJECT, body)

    async def confirm_code(self, user_id: int, submitted: int) -> ConfirmCodeResult:
        stored = await self.codes.get(user_id)
        if stored is None:
            logger.info(f"Verification code expired or missing for user {user_id}")
            return ConfirmCodeResult.expired()

        if stored != submitted:
            logger.warning(f"Incorrect verification code submitted for user {user_id}")
            return ConfirmCodeResult.incorrect()

        await self.codes.delete(user_id)
        logger.info(f"Verification code confirmed for user {user_id}")
        return ConfirmCodeResult.confirmed()
