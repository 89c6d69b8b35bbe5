"""OAuth 1.0a request signing (HMAC-SHA1) for the Garmin Health API.

Signing is kept free of I/O: every function here is deterministic given its
inputs, so signatures can be checked in tests without a network. Callers
generate a fresh timestamp and nonce per outbound request.
"""

import base64
import hashlib
import hmac
import logging
import secrets
import time
from typing import Iterable, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"

_DEFAULT_PORTS = {"http": 80, "https": 443}


class CryptoUnavailableError(Exception):
    """The HMAC-SHA1 primitive could not be used to sign a request."""

    pass


def percent_encode(value: str) -> str:
    """RFC 3986 percent-encoding as required by OAuth 1.0a section 3.6."""
    return quote(str(value), safe="~-._")


def generate_nonce() -> str:
    return secrets.token_hex(16)


def generate_timestamp() -> str:
    return str(int(time.time()))


def normalize_url(url: str) -> str:
    """Base string URI: lowercase scheme/host, no default port, no query."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if parts.port and parts.port != _DEFAULT_PORTS.get(scheme):
        host = f"{host}:{parts.port}"
    path = parts.path or "/"
    return urlunsplit((scheme, host, path, "", ""))


def normalize_parameters(params: Iterable[tuple[str, str]]) -> str:
    encoded = sorted((percent_encode(k), percent_encode(v)) for k, v in params)
    return "&".join(f"{k}={v}" for k, v in encoded)


def oauth_parameters(
    consumer_key: str,
    access_token: str,
    timestamp: str,
    nonce: str,
) -> dict[str, str]:
    return {
        "oauth_consumer_key": consumer_key,
        "oauth_nonce": nonce,
        "oauth_signature_method": SIGNATURE_METHOD,
        "oauth_timestamp": timestamp,
        "oauth_token": access_token,
        "oauth_version": OAUTH_VERSION,
    }


def signature_base_string(
    method: str,
    url: str,
    oauth_params: Mapping[str, str],
    params: Optional[Mapping[str, str]] = None,
) -> str:
    """Build ``METHOD&enc(url)&enc(sorted params)``.

    Query parameters already present in ``url`` take part in the signature,
    as do any extra ``params`` (form body fields).
    """
    all_params = list(oauth_params.items())
    all_params.extend(parse_qsl(urlsplit(url).query, keep_blank_values=True))
    if params:
        all_params.extend(params.items())

    return "&".join(
        [
            method.upper(),
            percent_encode(normalize_url(url)),
            percent_encode(normalize_parameters(all_params)),
        ]
    )


def sign(
    method: str,
    url: str,
    consumer_key: str,
    consumer_secret: str,
    access_token: str,
    token_secret: str,
    timestamp: str,
    nonce: str,
    params: Optional[Mapping[str, str]] = None,
) -> str:
    """Compute the base64 HMAC-SHA1 signature for one request.

    Raises:
        CryptoUnavailableError: If HMAC-SHA1 cannot be computed (e.g. SHA-1
            disabled by a FIPS-restricted OpenSSL build).
    """
    base_string = signature_base_string(
        method,
        url,
        oauth_parameters(consumer_key, access_token, timestamp, nonce),
        params,
    )
    signing_key = f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"

    try:
        digest = hmac.new(
            signing_key.encode("utf-8"),
            base_string.encode("utf-8"),
            hashlib.sha1,
        ).digest()
    except (ValueError, TypeError) as e:
        logger.error(f"HMAC-SHA1 signing unavailable: {e}")
        raise CryptoUnavailableError("HMAC-SHA1 signing is unavailable") from e

    return base64.b64encode(digest).decode("ascii")


def build_authorization_header(
    method: str,
    url: str,
    consumer_key: str,
    consumer_secret: str,
    access_token: str,
    token_secret: str,
    timestamp: Optional[str] = None,
    nonce: Optional[str] = None,
    params: Optional[Mapping[str, str]] = None,
) -> str:
    """Return the ``Authorization`` header value for a signed request."""
    timestamp = timestamp or generate_timestamp()
    nonce = nonce or generate_nonce()

    header_params = oauth_parameters(consumer_key, access_token, timestamp, nonce)
    header_params["oauth_signature"] = sign(
        method,
        url,
        consumer_key,
        consumer_secret,
        access_token,
        token_secret,
        timestamp,
        nonce,
        params,
    )

    fields = ", ".join(
        f'{percent_encode(k)}="{percent_encode(v)}"' for k, v in sorted(header_params.items())
    )
    return f"OAuth {fields}"
