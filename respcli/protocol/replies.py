"""
Reply Definitions

This module defines the typed value every server reply decodes into.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple, Union


class ReplyType(Enum):
    """RESP2 reply types, keyed by their wire tag."""
    SIMPLE_STRING = "+"
    ERROR = "-"
    INTEGER = ":"
    BULK_STRING = "$"
    ARRAY = "*"


ReplyValue = Union[str, int, Tuple["Reply", ...], None]


@dataclass(frozen=True)
class Reply:
    """
    A decoded server reply.

    Attributes:
        type: The RESP type of the reply
        value: The payload. Its shape depends on ``type``:
            SIMPLE_STRING, ERROR -> str
            INTEGER              -> int
            BULK_STRING          -> str, or None for a null bulk string
            ARRAY                -> tuple of Reply, or None for a null array
    """
    type: ReplyType
    value: ReplyValue = None

    def __post_init__(self):
        """Validate that the payload shape matches the reply type."""
        if self.type in (ReplyType.SIMPLE_STRING, ReplyType.ERROR):
            if not isinstance(self.value, str):
                raise TypeError(f"{self.type.name} reply needs a str value")
        elif self.type == ReplyType.INTEGER:
            if isinstance(self.value, bool) or not isinstance(self.value, int):
                raise TypeError("INTEGER reply needs an int value")
        elif self.type == ReplyType.BULK_STRING:
            if self.value is not None and not isinstance(self.value, str):
                raise TypeError("BULK_STRING reply needs a str or None value")
        elif self.type == ReplyType.ARRAY:
            if self.value is None:
                return
            items = tuple(self.value)
            if not all(isinstance(item, Reply) for item in items):
                raise TypeError("ARRAY reply elements must be Reply objects")
            # frozen dataclass: bypass __setattr__ to store the frozen copy
            object.__setattr__(self, "value", items)

    @property
    def is_null(self) -> bool:
        """True for a null bulk string or a null array."""
        return self.value is None

    @property
    def is_error(self) -> bool:
        return self.type == ReplyType.ERROR

    @classmethod
    def simple(cls, text: str) -> "Reply":
        """Create a simple string reply (+OK)."""
        return cls(ReplyType.SIMPLE_STRING, text)

    @classmethod
    def error(cls, message: str) -> "Reply":
        """Create an error reply (-ERR ...)."""
        return cls(ReplyType.ERROR, message)

    @classmethod
    def integer(cls, number: int) -> "Reply":
        """Create an integer reply (:42)."""
        return cls(ReplyType.INTEGER, number)

    @classmethod
    def bulk(cls, text: Optional[str]) -> "Reply":
        """Create a bulk string reply; None makes a null bulk string."""
        return cls(ReplyType.BULK_STRING, text)

    @classmethod
    def null_bulk(cls) -> "Reply":
        return cls(ReplyType.BULK_STRING, None)

    @classmethod
    def array(cls, items: Optional[Sequence["Reply"]]) -> "Reply":
        """Create an array reply; None makes a null array."""
        return cls(ReplyType.ARRAY, items)

    @classmethod
    def null_array(cls) -> "Reply":
        return cls(ReplyType.ARRAY, None)
