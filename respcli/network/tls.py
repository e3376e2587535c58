"""
TLS Context Module

Builds the ssl.SSLContext used when the client connects with --tls.
"""

import logging
import ssl

from ..config.options import ClientOptions

logger = logging.getLogger(__name__)


def build_ssl_context(options: ClientOptions) -> ssl.SSLContext:
    """
    Create a client-side SSL context from the TLS options.

    Args:
        options: ClientOptions with the tls, cacert, cacertdir, cert, key,
            insecure and tls_ciphers fields

    Returns:
        A configured SSLContext. When neither cacert nor cacertdir is set
        the system default trust store is used.

    Raises:
        ssl.SSLError / OSError: If a certificate or key cannot be loaded
    """
    context = ssl.create_default_context(
        cafile=options.cacert or None,
        capath=options.cacertdir or None,
    )

    if options.insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if options.cert:
        context.load_cert_chain(options.cert, keyfile=options.key or None)

    if options.tls_ciphers:
        context.set_ciphers(options.tls_ciphers)

    if options.tls_ciphersuites:
        logger.warning("--tls-ciphersuites is not supported, using defaults")

    return context


def server_hostname(options: ClientOptions) -> str:
    """Name sent in the TLS SNI extension and checked against the certificate."""
    return options.sni or options.host
