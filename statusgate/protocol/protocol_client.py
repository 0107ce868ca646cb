"""
Protocol Client - batched reads through the management-protocol proxy.

Every read is a declarative descriptor naming an mbean attribute on one
node's management endpoint. A batch of descriptors is sent as a single
POST; the proxy answers with one result per descriptor, in request order.

Two failure modes are kept apart:
- A per-item non-200 status is returned as an ordinary ReadResult.
- A transport failure of the whole batch raises ProtocolTransportError.

The poll loop relies on this split: only the second toggles credentials.
"""

import asyncio
from typing import Any

import aiohttp
import msgspec
import orjson
from aiohttp import ClientSession, ClientTimeout

from statusgate.credentials import CredentialResolver
from statusgate.errors import ProtocolTransportError

from .models import ReadRequest, ReadResult, ReadTarget


FAILURE_DETECTOR_MBEAN = "org.apache.cassandra.net:type=FailureDetector"
FAILURE_DETECTOR_ATTRIBUTE = "SimpleStates"

ENDPOINT_SNITCH_MBEAN = "org.apache.cassandra.db:type=EndpointSnitchInfo"
REGION_ATTRIBUTE = "Datacenter"


class ProtocolClient:
    def __init__(
        self,
        proxy_url: str,
        jmx_port: int,
        credentials: CredentialResolver,
        session: ClientSession | None = None,
    ) -> None:
        self._proxy_url = proxy_url
        self._jmx_port = jmx_port
        self._credentials = credentials
        self._session = session
        self._owns_session = session is None

    @property
    def proxy_url(self) -> str:
        return self._proxy_url

    def _target(self, address: str) -> ReadTarget:
        # Addresses carry a leading slash ("/10.0.0.1"), giving rmi://10.0.0.1.
        target = ReadTarget(
            url=f"service:jmx:rmi:///jndi/rmi:/{address}:{self._jmx_port}/jmxrmi",
        )

        if credentials := self._credentials.current():
            target = ReadTarget(
                url=target.url,
                user=credentials.user,
                password=credentials.password,
            )

        return target

    def failure_detector_request(self, address: str) -> ReadRequest:
        return ReadRequest(
            mbean=FAILURE_DETECTOR_MBEAN,
            attribute=FAILURE_DETECTOR_ATTRIBUTE,
            target=self._target(address),
        )

    def region_request(self, address: str) -> ReadRequest:
        return ReadRequest(
            mbean=ENDPOINT_SNITCH_MBEAN,
            attribute=REGION_ATTRIBUTE,
            target=self._target(address),
        )

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            # The proxy bounds worst-case latency, so no total deadline here.
            self._session = ClientSession(timeout=ClientTimeout(total=None))
            self._owns_session = True

        return self._session

    async def batch_query(self, requests: list[ReadRequest]) -> list[ReadResult]:
        """
        Execute one grouped call for all descriptors.

        Args:
            requests: Read descriptors, typically one per node address.

        Returns:
            One ReadResult per descriptor, in request order.

        Raises:
            ProtocolTransportError: If the batch as a whole failed.
        """
        if len(requests) == 0:
            return []

        session = await self._get_session()

        try:
            async with session.post(
                self._proxy_url,
                data=msgspec.json.encode(requests),
                headers={"Content-Type": "application/json"},
            ) as response:
                body = await response.read()

                if response.status >= 400:
                    raise ProtocolTransportError(
                        self._proxy_url,
                        f"proxy responded with HTTP {response.status}",
                    )

        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise ProtocolTransportError(self._proxy_url, str(err) or type(err).__name__) from err

        return self._parse_results(body, len(requests))

    def _parse_results(self, body: bytes, expected: int) -> list[ReadResult]:
        try:
            items: Any = orjson.loads(body)

        except orjson.JSONDecodeError as err:
            raise ProtocolTransportError(self._proxy_url, f"undecodable body: {err}") from err

        # A single-request batch may come back unwrapped.
        if isinstance(items, dict):
            items = [items]

        if not isinstance(items, list) or len(items) != expected:
            raise ProtocolTransportError(
                self._proxy_url,
                f"expected {expected} results, got {len(items) if isinstance(items, list) else 'none'}",
            )

        results: list[ReadResult] = []
        for item in items:
            if not isinstance(item, dict):
                results.append(ReadResult(status=500, error="malformed result"))
                continue

            status = item.get("status")
            results.append(
                ReadResult(
                    status=status if isinstance(status, int) else 500,
                    value=item.get("value"),
                    error=item.get("error"),
                )
            )

        return results

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
