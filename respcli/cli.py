#!/usr/bin/env python3
"""
respcli Entry Point

Command-line front-end for the RESP client.

Usage:
    respcli                                  # Interactive mode
    respcli -h 10.0.0.1 -p 6380 GET mykey    # Single command
    respcli -r 100 -i 0.5 INCR counter       # Repeat with interval
    respcli --scan --pattern 'user:*'        # List keys with SCAN
    respcli --debug PING                     # Debug logging on stderr

Environment Variables:
    REDISCLI_AUTH       - Password used when -a/--pass are not given
    RESPCLI_HOST        - Default server hostname
    RESPCLI_PORT        - Default server port
    RESPCLI_LOG_LEVEL   - Logging level (default WARNING)

Exit Status:
    0 on success. 1 when the server cannot be reached, even without -e
    (redis-cli does the same). With -e, also 1 when a command fails or
    the server answers with an error reply.
"""

import argparse
import logging
import sys
from time import sleep
from typing import List, Optional

from . import __version__
from .config.options import ClientOptions
from .config.settings import settings
from .exceptions import ConnectError, DecodeError
from .network.session import RedisSession, command_name

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline
except ImportError:
    pass  # readline not available on Windows by default

logger = logging.getLogger(__name__)

AUTH_WARNING = (
    "Warning: Using a password with '-a' or '-u' option on the command "
    "line interface may not be safe."
)


def build_parser() -> argparse.ArgumentParser:
    """Build the option table. -h is the hostname, so help is --help only."""
    parser = argparse.ArgumentParser(
        prog="respcli",
        usage="%(prog)s [OPTIONS] [cmd [arg [arg ...]]]",
        description="Command-line client for Redis-compatible servers",
        add_help=False,
    )

    connection = parser.add_argument_group("connection")
    connection.add_argument("-h", dest="host", default=settings.HOST,
                            help="Server hostname (default: %(default)s)")
    connection.add_argument("-p", dest="port", type=int, default=settings.PORT,
                            help="Server port (default: %(default)s)")
    connection.add_argument("-s", dest="socket", default="",
                            help="Server socket (overrides hostname and port)")
    connection.add_argument("-u", dest="uri", default="",
                            help="Server URI, redis://[[user]:pass@]host[:port][/db]")
    connection.add_argument("-n", dest="db", type=int, default=0,
                            help="Database number")

    auth = parser.add_argument_group("authentication")
    auth.add_argument("-a", dest="password", default="",
                      help="Password to use when connecting to the server")
    auth.add_argument("--user", default="",
                      help="Used to send ACL style 'AUTH username pass'. Needs -a.")
    auth.add_argument("--pass", dest="pass_", default="",
                      help="Alias of -a for consistency with the new --user option")
    auth.add_argument("--askpass", action="store_true",
                      help="Force user to input password from STDIN")
    auth.add_argument("--no-auth-warning", action="store_true",
                      help="Don't show warning message when using password on command line")

    tls = parser.add_argument_group("tls")
    tls.add_argument("--tls", action="store_true",
                     help="Establish a secure TLS connection")
    tls.add_argument("--sni", default="", help="Server name indication for TLS")
    tls.add_argument("--cacert", default="", help="CA Certificate file to verify with")
    tls.add_argument("--cacertdir", default="",
                     help="Directory where trusted CA certificates are stored")
    tls.add_argument("--insecure", action="store_true",
                     help="Allow insecure TLS connection by skipping cert validation")
    tls.add_argument("--cert", default="", help="Client certificate to authenticate with")
    tls.add_argument("--key", default="", help="Private key file to authenticate with")
    tls.add_argument("--tls-ciphers", default="",
                     help="Preferred ciphers (TLSv1.2 and below)")
    tls.add_argument("--tls-ciphersuites", default="",
                     help="Preferred ciphersuites (TLSv1.3)")

    execution = parser.add_argument_group("execution")
    execution.add_argument("-r", dest="repeat", type=int, default=1,
                           help="Execute specified command N times")
    execution.add_argument("-i", dest="interval", type=float, default=0.0,
                           help="Seconds to wait between commands with -r and between --scan pages")
    execution.add_argument("-e", dest="exit_error", action="store_true",
                           help="Return exit error code when command execution fails")
    execution.add_argument("--raw", action="store_true",
                           help="Use raw formatting for replies (default when STDOUT is not a tty)")
    execution.add_argument("--no-raw", action="store_true",
                           help="Force formatted output even when STDOUT is not a tty")
    execution.add_argument("--scan", action="store_true",
                           help="List all keys using the SCAN command")
    execution.add_argument("--pattern", default=settings.SCAN_PATTERN,
                           help="Keys pattern when using --scan (default: %(default)s)")
    execution.add_argument("--count", type=int, default=settings.SCAN_COUNT,
                           help="Count option when using --scan (default: %(default)s)")

    misc = parser.add_argument_group("misc")
    misc.add_argument("--debug", action="store_true",
                      default=settings.DEBUG, help="Enable debug logging")
    misc.add_argument("--help", action="help", help="Output this help and exit")
    misc.add_argument("--version", action="version",
                      version=f"%(prog)s {__version__}",
                      help="Output version and exit")

    parser.add_argument("command", nargs=argparse.REMAINDER,
                        help="Command and arguments to run")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def options_from_args(args: argparse.Namespace) -> ClientOptions:
    """
    Build ClientOptions from parsed arguments.

    Values from -u override the -h/-p/-n/-a/--user flags.

    Raises:
        ValueError: If the URI is not a valid redis:// or rediss:// URI
    """
    options = ClientOptions(
        host=args.host,
        port=args.port,
        socket=args.socket,
        password=args.password,
        pass_=args.pass_,
        user=args.user,
        askpass=args.askpass,
        db=args.db,
        repeat=args.repeat,
        interval=args.interval,
        exit_error=args.exit_error,
        tls=args.tls,
        sni=args.sni,
        cacert=args.cacert,
        cacertdir=args.cacertdir,
        insecure=args.insecure,
        cert=args.cert,
        key=args.key,
        tls_ciphers=args.tls_ciphers,
        tls_ciphersuites=args.tls_ciphersuites,
        raw=args.raw,
        no_raw=args.no_raw,
        scan=args.scan,
        pattern=args.pattern,
        count=args.count,
        no_auth_warning=args.no_auth_warning,
    )
    if args.uri:
        options.apply_uri(args.uri)
    return options


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag. Logs go to stderr."""
    level = logging.DEBUG if debug else settings.LOG_LEVEL.upper()

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def run_command(session: RedisSession, command: List[str]) -> int:
    """
    Connect and run one command, repeated per -r/-i.

    Returns:
        Process exit status
    """
    options = session.options
    try:
        session.connect()
    except ConnectError:
        return 1

    try:
        replies = session.repeat(" ".join(command), options.repeat, options.interval)
    except (OSError, DecodeError):
        return 1 if options.exit_error else 0

    if options.exit_error and any(reply.is_error for reply in replies):
        return 1
    return 0


def run_scan(session: RedisSession) -> int:
    """
    Connect and list every key matching --pattern.

    The whole scan runs -r times, waiting -i seconds between runs.
    """
    options = session.options
    try:
        session.connect()
    except ConnectError:
        return 1

    times = max(options.repeat, 1)
    for i in range(times):
        try:
            total = session.scan(options.pattern, options.count, options.interval)
        except (OSError, DecodeError):
            return 1 if options.exit_error else 0

        logger.debug(f"SCAN finished, {total} keys")
        if i < times - 1 and options.interval > 0:
            sleep(options.interval)
    return 0


def interactive(session: RedisSession) -> int:
    """
    Read-eval-print loop.

    A failed command closes the connection so the next one starts on a
    fresh, correctly framed stream.
    """
    try:
        session.connect()
    except ConnectError:
        pass

    try:
        while True:
            try:
                line = input(f"{session.prompt_prefix()}> ").strip()
            except EOFError:
                break

            if not line:
                continue
            if command_name(line) in ("EXIT", "QUIT"):
                break

            if not session.connected:
                try:
                    session.connect()
                except ConnectError:
                    continue

            try:
                session.execute_and_print(line)
            except (OSError, DecodeError):
                session.close()

    except KeyboardInterrupt:
        print()
    finally:
        session.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    try:
        options = options_from_args(args)
    except ValueError as e:
        print(f"Invalid URI: {e}", file=sys.stderr)
        return 1

    if (options.password or options.pass_) and not options.no_auth_warning:
        print(AUTH_WARNING, file=sys.stderr)

    # binary payloads were decoded with surrogateescape
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(errors="surrogateescape")

    with RedisSession(options, output=sys.stdout) as session:
        if options.scan:
            return run_scan(session)
        if args.command:
            return run_command(session, args.command)
        return interactive(session)


if __name__ == "__main__":
    sys.exit(main())
