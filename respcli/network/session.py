"""
Session Module

This module implements the client side of one connection to a Redis
server: dialing (TCP, Unix socket or TLS), the AUTH and SELECT handshake,
and command execution with repeat and SCAN pagination on top.

Every command is written as a single text line ending in \r\n and the
server's inline command parser splits it into arguments. Exactly one
command is in flight at a time; a Session must not be shared between
threads.
"""

import getpass
import logging
import os
import socket
import sys
from time import sleep
from typing import List, Optional, TextIO, Tuple

from ..config.options import ClientOptions
from ..config.settings import settings
from ..exceptions import ConnectError, DecodeError
from ..protocol.formatter import ReplyFormatter
from ..protocol.parser import ENCODING, ENCODING_ERRORS, RespParser
from ..protocol.replies import Reply, ReplyType
from .tls import build_ssl_context, server_hostname

logger = logging.getLogger(__name__)


def command_name(command: str) -> str:
    """Return the upper-cased first token of a command line."""
    parts = command.split()
    return parts[0].upper() if parts else ""


class RedisSession:
    """
    A synchronous connection to a Redis server.

    Usage:
        with RedisSession(ClientOptions(port=6379)) as session:
            session.connect()
            session.execute_and_print("PING")

    Attributes:
        options: The ClientOptions this session was created from
        output: Text stream replies and error messages are written to
        db: Database index currently selected on the server
        connected: True while a socket is open
        formatter: ReplyFormatter in raw or structured mode
    """

    def __init__(
            self,
            options: ClientOptions = None,
            output: TextIO = None,
            parser: RespParser = None,
    ):
        """
        Initialize the session. No connection is made until connect().

        Args:
            options: Connection and output options (defaults if omitted)
            output: Output stream (sys.stdout if omitted)
            parser: RespParser instance (creates new one if not provided)
        """
        self.options = options if options is not None else ClientOptions()
        self.output = output if output is not None else sys.stdout
        self.parser = parser if parser is not None else RespParser()
        self.formatter = ReplyFormatter(raw=self._use_raw_output())
        self.db = self.options.db
        self.connected = False

        self._sock: Optional[socket.socket] = None
        self._reader = None

    def _use_raw_output(self) -> bool:
        """--no-raw wins, then --raw, then raw whenever output is not a tty."""
        if self.options.no_raw:
            return False
        if self.options.raw:
            return True
        isatty = getattr(self.output, "isatty", None)
        return not (isatty is not None and isatty())

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """
        Connect, authenticate and select the database.

        AUTH and SELECT are best-effort: a failure is reported on the
        output stream and the session stays connected.

        Raises:
            ConnectError: If the socket or TLS handshake fails. The
                message has already been written to the output stream.
        """
        self.close()
        address = self.options.address
        logger.debug(f"Connecting to {address}")

        try:
            sock = self._open_socket()
        except OSError as exc:
            error = ConnectError(address, exc)
            self._report(f"{error}\n")
            raise error from exc

        self._sock = sock
        self._reader = sock.makefile("rb", buffering=settings.READ_BUFFER_SIZE)
        self.connected = True
        logger.debug(f"Connected to {address}")

        try:
            self._auth()
            self._select_db()
        except (OSError, DecodeError) as exc:
            # execute() has already reported it
            logger.debug(f"Handshake with {address} stopped: {exc}")

    def _open_socket(self) -> socket.socket:
        timeout = self.options.connect_timeout

        if self.options.socket:
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.settimeout(timeout)
                sock.connect(self.options.socket)
            except OSError:
                sock.close()
                raise
        else:
            sock = socket.create_connection(
                (self.options.host, self.options.port), timeout=timeout
            )

        if self.options.tls:
            try:
                context = build_ssl_context(self.options)
                sock = context.wrap_socket(
                    sock, server_hostname=server_hostname(self.options)
                )
            except OSError:
                sock.close()
                raise

        # commands block until the server answers
        sock.settimeout(None)
        return sock

    def _password(self) -> str:
        if self.options.askpass:
            return getpass.getpass("Please input password: ")
        return (
            self.options.pass_
            or self.options.password
            or os.environ.get(settings.AUTH_ENV_VAR, "")
        )

    def _auth(self) -> None:
        password = self._password()
        if not password:
            return

        parts = ["AUTH"]
        if self.options.user:
            parts.append(self.options.user)
        parts.append(password)

        reply = self.execute(" ".join(parts))
        if reply.is_error:
            self._report(f"AUTH failed: {reply.value}\n")

    def _select_db(self) -> None:
        if self.db == 0:
            return

        reply = self.execute(f"SELECT {self.db}")
        if reply.is_error:
            self._report(f"SELECT {self.db} failed: {reply.value}\n")
            self.db = 0

    def close(self) -> None:
        """Close the connection. Safe to call when already closed."""
        if self._reader is not None:
            self._reader.close()
        if self._sock is not None:
            self._sock.close()
            logger.debug(f"Disconnected from {self.options.address}")
        self._reader = None
        self._sock = None
        self.connected = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    def execute(self, command: str) -> Reply:
        """
        Send one command line and read its reply.

        Args:
            command: Command and arguments as typed, without terminator

        Returns:
            The decoded Reply. Error replies are returned, not raised.

        Raises:
            OSError: If the session is not connected or the socket fails
            DecodeError: If the reply is malformed
        """
        try:
            if not self.connected:
                raise ConnectionError("not connected")
            self._sock.sendall(f"{command}\r\n".encode(ENCODING, ENCODING_ERRORS))
            logger.debug(f"Sent {command!r}")
            reply = self.parser.read_reply(self._reader)
        except (OSError, DecodeError) as exc:
            self._report(f"{exc}\n")
            raise

        logger.debug(f"Received {reply.type.name} reply")
        return reply

    def execute_and_print(self, command: str) -> Reply:
        """
        Execute a command and print its reply.

        INFO payloads are written verbatim in both output modes. A
        successful SELECT updates the tracked database index from the
        command text; a failed one resets it to 0.
        """
        reply = self.execute(command)
        name = command_name(command)

        if name == "INFO" and reply.type == ReplyType.BULK_STRING and not reply.is_null:
            self.output.write(reply.value)
            self.output.flush()
        else:
            self.print_reply(reply)

        if name == "SELECT":
            self._track_select(command, reply)
        return reply

    def _track_select(self, command: str, reply: Reply) -> None:
        if reply.is_error:
            self.db = 0
        elif reply.value == "OK":
            try:
                self.db = int(command.split()[1])
            except (IndexError, ValueError):
                self.db = 0

    def repeat(self, command: str, times: int = 1, interval: float = 0.0) -> List[Reply]:
        """
        Execute and print a command several times.

        Args:
            command: Command line to run
            times: Number of executions (values below 1 run it once)
            interval: Seconds to sleep between executions, never after
                the last one

        Returns:
            The replies, in order

        Raises:
            OSError / DecodeError: From the first failing execution; the
                remaining repetitions are skipped
        """
        times = max(times, 1)
        replies = []
        for i in range(times):
            replies.append(self.execute_and_print(command))
            if i < times - 1 and interval > 0:
                sleep(interval)
        return replies

    def scan(
            self,
            pattern: str = settings.SCAN_PATTERN,
            count: int = settings.SCAN_COUNT,
            interval: float = 0.0,
    ) -> int:
        """
        List every key matching pattern with SCAN, printing as pages arrive.

        Keys are printed page by page and never collected. The loop ends
        when the server returns cursor "0". Keys are not deduplicated.
        When interval is set the client sleeps that long between pages.

        Returns:
            Number of keys printed

        Raises:
            OSError / DecodeError: On transport failure or a reply that is
                not a [cursor, keys] pair
        """
        cursor = "0"
        total = 0
        while True:
            reply = self.execute(f"SCAN {cursor} MATCH {pattern} COUNT {count}")
            cursor, keys = self._scan_page(reply)
            for key in keys:
                self.print_reply(key)
            total += len(keys)
            logger.debug(f"SCAN page with {len(keys)} keys, next cursor {cursor}")
            if cursor == "0":
                return total
            if interval > 0:
                sleep(interval)

    def _scan_page(self, reply: Reply) -> Tuple[str, Tuple[Reply, ...]]:
        if reply.is_error:
            self.print_reply(reply)
        elif (
                reply.type == ReplyType.ARRAY
                and not reply.is_null
                and len(reply.value) == 2
                and isinstance(reply.value[0].value, str)
                and reply.value[1].type == ReplyType.ARRAY
        ):
            cursor, keys = reply.value
            return cursor.value, keys.value or ()

        error = DecodeError("unexpected SCAN reply")
        self._report(f"{error}\n")
        raise error

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def print_reply(self, reply: Reply) -> None:
        """Render a reply on the output stream in the session's mode."""
        self.formatter.write(self.output, reply)
        self.output.flush()

    def _report(self, message: str) -> None:
        self.output.write(message)
        self.output.flush()

    def prompt_prefix(self) -> str:
        """
        Text shown before '> ' in interactive mode.

        Examples: 'not connected', '127.0.0.1:6379', '127.0.0.1:6379[3]'
        """
        if not self.connected:
            return "not connected"
        if self.db != 0:
            return f"{self.options.address}[{self.db}]"
        return self.options.address
