"""Request signing for the bitFlyer Lightning API.

Every private REST call carries three headers derived from the API key and
secret::

    ACCESS-KEY        API key
    ACCESS-TIMESTAMP  Unix time in seconds
    ACCESS-SIGN       hex(HMAC-SHA256(secret, timestamp + method + target + body))

``target`` is the request path including the query string exactly as sent.
"""

import hashlib
import hmac
import time
from typing import Any, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, SecretStr

from .exceptions import BodyReadError


ACCESS_KEY_HEADER = "ACCESS-KEY"
ACCESS_TIMESTAMP_HEADER = "ACCESS-TIMESTAMP"
ACCESS_SIGN_HEADER = "ACCESS-SIGN"
CONTENT_TYPE = "application/json"


class Credentials(BaseModel):
    """API key and secret. The secret is masked in repr and dumps."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    api_secret: SecretStr

    def secret_bytes(self) -> bytes:
        return self.api_secret.get_secret_value().encode()


def _now() -> int:
    # Seconds, not milliseconds: the API rejects anything else
    return int(time.time())


def hmac_sha256_hex(secret: bytes, message: bytes) -> str:
    """Lower-case hex HMAC-SHA256 digest."""
    return hmac.new(secret, message, hashlib.sha256).hexdigest()


def request_target(request: httpx.Request) -> str:
    """Path plus query string of ``request``, verbatim."""
    return request.url.raw_path.decode("ascii")


class Signer:
    """Signs outbound HTTP requests with held credentials."""

    def __init__(self, credentials: Credentials):
        self._credentials = credentials

    @property
    def api_key(self) -> str:
        return self._credentials.api_key

    def signature(
        self,
        timestamp: int,
        method: str,
        target: str,
        body: Union[bytes, str] = b"",
    ) -> str:
        """
        Compute ``ACCESS-SIGN`` for the given request parts.

        Args:
            timestamp: Unix time in seconds
            method: HTTP method, used as given
            target: Path and query string
            body: Raw request body, empty for bodiless requests

        Returns:
            64-character lower-case hex digest
        """
        if isinstance(body, str):
            body = body.encode()
        message = f"{timestamp}{method}{target}".encode() + body
        return hmac_sha256_hex(self._credentials.secret_bytes(), message)

    def sign_headers(
        self,
        method: str,
        target: str,
        body: Union[bytes, str] = b"",
        timestamp: Optional[int] = None,
    ) -> dict[str, str]:
        """Build the authentication headers for a request."""
        if timestamp is None:
            timestamp = _now()
        return {
            ACCESS_KEY_HEADER: self._credentials.api_key,
            ACCESS_TIMESTAMP_HEADER: str(timestamp),
            ACCESS_SIGN_HEADER: self.signature(timestamp, method, target, body),
            "Content-Type": CONTENT_TYPE,
        }

    def sign(self, request: httpx.Request) -> None:
        """
        Sign a request whose body can be read synchronously.

        The body is read into the request so the transport can still send it.

        Raises:
            BodyReadError: If the body cannot be read
        """
        timestamp = _now()
        try:
            body = request.read()
        except Exception as e:
            raise BodyReadError(f"failed to read request body: {e}") from e
        self._apply(request, timestamp, body)

    async def async_sign(self, request: httpx.Request) -> None:
        """
        Sign a request, reading async streaming bodies if needed.

        Raises:
            BodyReadError: If the body cannot be read
        """
        timestamp = _now()
        try:
            body = await request.aread()
        except Exception as e:
            raise BodyReadError(f"failed to read request body: {e}") from e
        self._apply(request, timestamp, body)

    def _apply(self, request: httpx.Request, timestamp: int, body: bytes) -> None:
        headers = self.sign_headers(request.method, request_target(request), body, timestamp)
        request.headers.update(headers)


def ws_auth_params(
    credentials: Credentials, nonce: Any, timestamp: Optional[int] = None
) -> dict[str, Any]:
    """
    Build the params of the Realtime API ``auth`` call.

    The signature is HMAC-SHA256 over ``str(timestamp) + api_key``.
    """
    if timestamp is None:
        timestamp = _now()
    message = f"{timestamp}{credentials.api_key}".encode()
    return {
        "api_key": credentials.api_key,
        "timestamp": timestamp,
        "nonce": str(nonce),
        "signature": hmac_sha256_hex(credentials.secret_bytes(), message),
    }
