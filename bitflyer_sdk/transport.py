"""httpx transports that sign every request before sending it."""

from typing import Optional

import httpx

from .auth import Signer


class AuthenticatedTransport(httpx.AsyncBaseTransport):
    """
    Async transport decorator adding bitFlyer authentication headers.

    If signing fails the request is never sent and the signing error
    propagates to the caller unchanged.
    """

    def __init__(self, signer: Signer, base: Optional[httpx.AsyncBaseTransport] = None):
        """
        Args:
            signer: Signer holding the API credentials
            base: Transport that actually sends requests, httpx's default when omitted
        """
        self.signer = signer
        self._base = base

    @property
    def base(self) -> httpx.AsyncBaseTransport:
        if self._base is None:
            self._base = httpx.AsyncHTTPTransport()
        return self._base

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await self.signer.async_sign(request)
        return await self.base.handle_async_request(request)

    async def aclose(self) -> None:
        if self._base is not None:
            await self._base.aclose()


class AuthenticatedSyncTransport(httpx.BaseTransport):
    """Blocking counterpart of :class:`AuthenticatedTransport`."""

    def __init__(self, signer: Signer, base: Optional[httpx.BaseTransport] = None):
        self.signer = signer
        self._base = base

    @property
    def base(self) -> httpx.BaseTransport:
        if self._base is None:
            self._base = httpx.HTTPTransport()
        return self._base

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.signer.sign(request)
        return self.base.handle_request(request)

    def close(self) -> None:
        if self._base is not None:
            self._base.close()
