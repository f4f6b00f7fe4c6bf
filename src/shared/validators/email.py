"""Email normalization."""


def normalize_email(email: str) -> str:
    """Canonical form used for storing and looking up accounts.

    Addresses are compared case-insensitively, so ``A@Example.COM`` and
    ``a@example.com`` name the same account.

    Examples:
        >>> normalize_email("  A@Example.COM ")
        'a@example.com'

    """
    return email.strip().lower()
