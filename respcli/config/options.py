"""
Client Options

The option table the Session reads: where to connect, how to authenticate,
how to render replies and how to repeat or paginate commands.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

from .settings import settings


@dataclass
class ClientOptions:
    """
    Options for a single client session.

    Attributes:
        host: Server hostname
        port: Server port
        socket: Unix socket path (overrides host and port)
        password: Password given with -a
        pass_: Password given with --pass (takes precedence over -a)
        user: ACL username sent as 'AUTH <user> <pass>'
        askpass: Prompt for the password on stdin
        db: Database index, kept in sync with successful SELECTs
        repeat: Number of times to run the command
        interval: Seconds to wait between repetitions
        raw: Force raw output
        no_raw: Force structured output even when stdout is not a tty
        exit_error: Exit non-zero when a command fails
    """
    host: str = settings.HOST
    port: int = settings.PORT
    socket: str = ""
    password: str = ""
    pass_: str = ""
    user: str = ""
    askpass: bool = False
    uri: str = ""
    db: int = 0
    repeat: int = 1
    interval: float = 0.0
    exit_error: bool = False

    # TLS
    tls: bool = False
    sni: str = ""
    cacert: str = ""
    cacertdir: str = ""
    insecure: bool = False
    cert: str = ""
    key: str = ""
    tls_ciphers: str = ""
    tls_ciphersuites: str = ""

    # Output
    raw: bool = False
    no_raw: bool = False

    # SCAN
    scan: bool = False
    pattern: str = settings.SCAN_PATTERN
    count: int = settings.SCAN_COUNT

    no_auth_warning: bool = False
    connect_timeout: Optional[float] = settings.CONNECT_TIMEOUT

    @property
    def address(self) -> str:
        """Human readable server address used in messages and the prompt."""
        if self.socket:
            return self.socket
        return f"{self.host}:{self.port}"

    def apply_uri(self, uri: str) -> None:
        """
        Fill connection fields from a redis:// or rediss:// URI.

        Format: redis[s]://[[user]:password@]host[:port][/db]

        Raises:
            ValueError: If the scheme is not redis or rediss, or the
                port/db parts are not numbers
        """
        parsed = urlparse(uri)
        if parsed.scheme not in ("redis", "rediss"):
            raise ValueError(f"Invalid URI scheme: {parsed.scheme or uri}")

        self.uri = uri
        if parsed.scheme == "rediss":
            self.tls = True
        if parsed.hostname:
            self.host = parsed.hostname
        if parsed.port:
            self.port = parsed.port
        if parsed.username:
            self.user = unquote(parsed.username)
        if parsed.password:
            self.password = unquote(parsed.password)

        path = parsed.path.lstrip("/")
        if path:
            self.db = int(path)
