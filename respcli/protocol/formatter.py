"""
Reply Formatter Module

This module renders Reply trees the way redis-cli prints them.

Two modes:
    structured  type annotations and quoting, for people at a terminal
    raw         bare payloads, for pipes and scripts
"""

from io import StringIO
from typing import TextIO

from .replies import Reply, ReplyType

_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def quote(text: str) -> str:
    """
    Double-quote text, escaping control and non-printable characters.

    Bytes that were not valid UTF-8 (carried as lone surrogates) are
    written back as \\xNN.

    Examples:
        >>> quote("hello")
        '"hello"'
        >>> quote("a\\nb")
        '"a\\\\nb"'
    """
    out = ['"']
    for ch in text:
        code = ord(ch)
        if ch in _ESCAPES:
            out.append(_ESCAPES[ch])
        elif 0xDC80 <= code <= 0xDCFF:
            out.append(f"\\x{code - 0xDC00:02x}")
        elif ch.isprintable():
            out.append(ch)
        elif code < 0x80:
            out.append(f"\\x{code:02x}")
        elif code < 0x10000:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


class ReplyFormatter:
    """
    Renders replies in structured or raw mode.

    Rendering rules:
        null bulk/array   raw: blank line      structured: (nil)
        simple string     text as-is in both modes
        bulk string       raw: text            structured: "quoted"
        error             raw: text            structured: (error) text
        integer           raw: digits          structured: (integer) digits
        array             each element on its own line; structured mode
                          prefixes every element with "N) " at every depth

    Usage:
        formatter = ReplyFormatter(raw=False)
        formatter.write(sys.stdout, reply)
    """

    def __init__(self, raw: bool = False):
        self.raw = raw

    def format(self, reply: Reply) -> str:
        """
        Render a reply to a string.

        Examples:
            >>> ReplyFormatter().format(Reply.integer(42))
            '(integer) 42\\n'
            >>> ReplyFormatter(raw=True).format(Reply.bulk("hello"))
            'hello\\n'
        """
        buffer = StringIO()
        self.write(buffer, reply)
        return buffer.getvalue()

    def write(self, stream: TextIO, reply: Reply) -> None:
        """Render a reply onto a text stream."""
        if reply.is_null:
            stream.write("\n" if self.raw else "(nil)\n")
            return

        if reply.type == ReplyType.SIMPLE_STRING:
            stream.write(f"{reply.value}\n")
        elif reply.type == ReplyType.BULK_STRING:
            text = reply.value if self.raw else quote(reply.value)
            stream.write(f"{text}\n")
        elif reply.type == ReplyType.ERROR:
            prefix = "" if self.raw else "(error) "
            stream.write(f"{prefix}{reply.value}\n")
        elif reply.type == ReplyType.INTEGER:
            prefix = "" if self.raw else "(integer) "
            stream.write(f"{prefix}{reply.value}\n")
        elif reply.type == ReplyType.ARRAY:
            for index, item in enumerate(reply.value, start=1):
                if not self.raw:
                    stream.write(f"{index}) ")
                self.write(stream, item)
