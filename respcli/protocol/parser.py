"""
RESP Parser Module

This module decodes server replies from a binary stream into Reply trees.

RESP2 reply format (every line ends with \r\n):
    +OK                  simple string
    -ERR message         error
    :1000                integer
    $5\r\nhello          bulk string ($-1 is null, $0 is empty)
    *2\r\n<reply><reply> array (*-1 is null)
"""

from typing import BinaryIO

from ..config.settings import settings
from ..exceptions import DecodeError
from .replies import Reply, ReplyType


ENCODING = "utf-8"
# Undecodable bytes round-trip through str as lone surrogates
ENCODING_ERRORS = "surrogateescape"

_TAGS = {member.value.encode(): member for member in ReplyType}


def decode_text(data: bytes) -> str:
    """Decode payload bytes without losing non UTF-8 content."""
    return data.decode(ENCODING, ENCODING_ERRORS)


class RespParser:
    """
    Recursive-descent decoder for RESP2 replies.

    Each call to read_reply() consumes exactly one reply (and, for arrays,
    all of its elements) from the stream and leaves the stream positioned
    at the first byte of the next reply. The stream must be a binary
    file-like object providing read(n) and readline(), such as the result
    of socket.makefile('rb') or an io.BytesIO.

    Usage:
        parser = RespParser()
        reply = parser.read_reply(sock.makefile('rb'))
    """

    def read_reply(self, stream: BinaryIO) -> Reply:
        """
        Read one complete reply from the stream.

        Args:
            stream: Binary stream positioned at the start of a reply

        Returns:
            The fully decoded Reply

        Raises:
            DecodeError: On an unknown type tag, malformed header or
                premature end of stream

        Examples:
            >>> import io
            >>> RespParser().read_reply(io.BytesIO(b":42\\r\\n"))
            Reply(type=<ReplyType.INTEGER: ':'>, value=42)
        """
        tag = stream.read(1)
        if not tag:
            raise DecodeError("unexpected end of stream")

        reply_type = _TAGS.get(tag)
        if reply_type is None:
            raise DecodeError(f"unknown response type: {decode_text(tag)}")

        if reply_type == ReplyType.SIMPLE_STRING:
            return Reply.simple(decode_text(self._read_line(stream)))
        if reply_type == ReplyType.ERROR:
            return Reply.error(decode_text(self._read_line(stream)))
        if reply_type == ReplyType.INTEGER:
            return Reply.integer(self._read_number(stream, "integer"))
        if reply_type == ReplyType.BULK_STRING:
            return self._read_bulk(stream)
        return self._read_array(stream)

    def _read_line(self, stream: BinaryIO) -> bytes:
        """Read one line and strip its terminator (\r\n or a bare \n)."""
        line = stream.readline()
        if not line.endswith(b"\n"):
            raise DecodeError("unexpected end of stream")
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        return line

    def _read_number(self, stream: BinaryIO, what: str) -> int:
        line = self._read_line(stream)
        try:
            return int(line)
        except ValueError:
            raise DecodeError(f"invalid {what}: {decode_text(line)!r}") from None

    def _read_bulk(self, stream: BinaryIO) -> Reply:
        """
        Read a bulk string body after its '$' tag.

        Format: $<length>\r\n<bytes>\r\n
        """
        length = self._read_number(stream, "bulk length")
        if length == -1:
            return Reply.null_bulk()
        if length < 0 or length > settings.MAX_BULK_LENGTH:
            raise DecodeError(f"invalid bulk length: {length}")
        if length == 0:
            self._read_line(stream)
            return Reply.bulk("")

        try:
            data = stream.read(length)
        except (OverflowError, MemoryError):
            raise DecodeError(f"invalid bulk length: {length}") from None
        if len(data) < length:
            raise DecodeError("unexpected end of stream")
        self._read_line(stream)
        return Reply.bulk(decode_text(data))

    def _read_array(self, stream: BinaryIO) -> Reply:
        """
        Read an array body after its '*' tag.

        Format: *<count>\r\n<reply>...<reply>
        """
        count = self._read_number(stream, "array length")
        if count == -1:
            return Reply.null_array()
        if count < 0:
            raise DecodeError(f"invalid array length: {count}")

        items = []
        for _ in range(count):
            items.append(self.read_reply(stream))
        return Reply.array(items)


_default_parser = RespParser()


def read_reply(stream: BinaryIO) -> Reply:
    """Read one reply from the stream with a shared parser."""
    return _default_parser.read_reply(stream)
