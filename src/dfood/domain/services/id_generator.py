"""Entity ID generator service.

Generates opaque, unique identifiers in ``<unix-nanos>-<8 hex>`` format,
optionally prefixed with the entity kind (``user-``, ``order-``, ...).
"""

import re
import secrets
import time


class IdGenerator:
    """Generator for unique entity IDs.

    The nanosecond timestamp keeps IDs roughly sortable by creation time;
    the four random bytes separate IDs minted within the same nanosecond.

    Example IDs: 1718030201123456789-9f3ac10e, user-1718030201123456789-0b1c2d3e
    """

    PATTERN = re.compile(r"^(?:[a-z]+-)?\d+-[0-9a-f]{8}$")

    USER_PREFIX = "user"

    @classmethod
    def generate(cls, prefix: str | None = None) -> str:
        """Generate a new unique ID.

        Args:
            prefix: Optional entity prefix, joined with a dash.

        Returns:
            The generated ID.
        """
        value = f"{time.time_ns()}-{secrets.token_hex(4)}"
        if prefix:
            return f"{prefix}-{value}"
        return value

    @classmethod
    def validate(cls, entity_id: str) -> bool:
        """Check that an ID has the generated shape.

        Examples:
            >>> IdGenerator.validate(IdGenerator.generate("user"))
            True
            >>> IdGenerator.validate("not an id")
            False
        """
        if not isinstance(entity_id, str):
            return False
        return bool(cls.PATTERN.match(entity_id))


def generate_user_id() -> str:
    """Generate an ID for a new user record."""
    return IdGenerator.generate(IdGenerator.USER_PREFIX)
