"""Protocol module for respcli."""

from ..exceptions import DecodeError
from .formatter import ReplyFormatter, quote
from .parser import RespParser, read_reply
from .replies import Reply, ReplyType

__all__ = [
    "DecodeError",
    "Reply",
    "ReplyType",
    "ReplyFormatter",
    "RespParser",
    "quote",
    "read_reply",
]
