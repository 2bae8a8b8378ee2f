"""Instance ID generation."""

import secrets
import string

_ALPHABET = string.ascii_lowercase + string.digits


def generate_instance_id(length: int = 12) -> str:
    """Return a random opaque ID.

    IDs carry no information about content, so editing a card never
    changes its identity.
    """
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def unique_name(desired: str, existing: set[str]) -> str:
    """Return desired if unused, otherwise append (1), (2), etc."""
    if desired not in existing:
        return desired
    n = 1
    while f"{desired} ({n})" in existing:
        n += 1
    return f"{desired} ({n})"
