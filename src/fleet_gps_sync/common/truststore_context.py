# fleet_gps_sync/common/truststore_context.py
"""
SSLContext factory backed by the operating system trust store.

Vendor endpoints are reached through whatever TLS interception the hosting
network applies. Where that interception uses a private root CA installed in
the OS store (Windows/macOS), Python's bundled certifi roots reject the
vendor certificates. Setting `http.use_truststore: true` in the service
config routes verification through the `truststore` package instead.

`truststore` is an optional extra (`pip install fleet-gps-sync[truststore]`)
and is only imported when this factory is called.
"""

import ssl
from ssl import SSLContext

__all__: list[str] = ['build_truststore_ssl_context']


def build_truststore_ssl_context() -> SSLContext:
    """
    Create a client-side SSLContext that verifies against the OS trust store.

    Returns:
        truststore.SSLContext configured with PROTOCOL_TLS_CLIENT.

    Raises:
        RuntimeError: If truststore is not installed.
    """
    try:
        import truststore  # noqa: PLC0415
    except ImportError as import_error:
        raise RuntimeError(
            'truststore is required when http.use_truststore is enabled; '
            'install it with: pip install truststore'
        ) from import_error

    return truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
