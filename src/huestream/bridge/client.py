"""Hue bridge REST client.

Only the calls the effects need are implemented: reading and writing the
state of one light, and creating, activating and deleting the scenes used
as snapshots.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import aiohttp

from huestream.color import LightState
from huestream.const import HUE_DISCOVERY_URL
from huestream.exceptions import HueConnectionError, HueDeviceError

if TYPE_CHECKING:
    from typing import Self

_LOGGER = logging.getLogger(__name__)


def _raise_for_errors(data: Any, context: str) -> None:
    """Raise HueDeviceError if a bridge response holds error entries.

    The bridge answers 200 OK even on failure, with a list of
    {"error": {"type", "address", "description"}} entries.
    """
    if not isinstance(data, list):
        return
    errors = [entry["error"] for entry in data if isinstance(entry, dict) and "error" in entry]
    if errors:
        descriptions = "; ".join(
            f"{error.get('address', '?')}: {error.get('description', 'unknown error')}"
            for error in errors
        )
        raise HueDeviceError(f"{context} failed: {descriptions}")


class HueBridge:
    """Connection to a Hue bridge through its local REST API.

    A session is opened lazily by open() or by entering the async context
    manager. Requests are not retried; a timeout applies to each request
    when configured, a request without timeout can stall the action queue.

    Example:
        ```python
        async with HueBridge("192.168.0.100", username) as bridge:
            await bridge.connect()
            state = await bridge.get_state(1)
            await bridge.set_state(1, state.merge(bri=254))
        ```
    """

    def __init__(
        self,
        host: str,
        username: str,
        timeout: float | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            host: Bridge IP address or host name
            username: Application key registered on the bridge
            timeout: Timeout of each request in seconds, None for no timeout
            session: Existing session to use instead of opening one
        """
        self.host = host
        self.username = username
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Self:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    @property
    def base_url(self) -> str:
        return f"http://{self.host}/api/{self.username}"

    async def open(self) -> None:
        """Open the HTTP session if needed."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True

    async def close(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def connect(self) -> None:
        """Check that the bridge is reachable and the username accepted.

        Raises:
            HueConnectionError: If the bridge is unreachable or rejects the key
        """
        try:
            data = await self._request("GET", "/config")
        except HueDeviceError as e:
            raise HueConnectionError(f"Bridge {self.host} rejected the connection: {e}") from e

        # Unknown keys get the public short config, without the whitelist
        if not isinstance(data, dict) or "whitelist" not in data:
            raise HueConnectionError(f"Bridge {self.host} did not accept the username")
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "connect",
                "host": self.host,
                "values": {"name": data.get("name"), "apiversion": data.get("apiversion")},
            }
        )

    async def get_state(self, fixture_id: int) -> LightState:
        """Return the current state of a light."""
        data = await self._request("GET", f"/lights/{fixture_id}")
        return LightState.from_payload(data.get("state", {}))

    async def set_state(self, fixture_id: int, state: LightState) -> None:
        """Apply a partial state to a light."""
        await self._request("PUT", f"/lights/{fixture_id}/state", state.to_payload())

    async def create_scene(self, name: str, fixture_ids: Sequence[int]) -> str:
        """Save the current state of the lights into a new scene.

        Returns:
            Identifier assigned to the scene by the bridge
        """
        data = await self._request(
            "POST",
            "/scenes",
            {
                "name": name,
                "type": "LightScene",
                "lights": [str(fixture_id) for fixture_id in fixture_ids],
                "recycle": True,
            },
        )
        try:
            return str(data[0]["success"]["id"])
        except (IndexError, KeyError, TypeError) as e:
            raise HueDeviceError(f"Unexpected scene creation response: {data!r}") from e

    async def activate_scene(self, scene_id: str) -> None:
        """Apply a saved scene to its lights."""
        await self._request("PUT", "/groups/0/action", {"scene": scene_id})

    async def delete_scene(self, scene_id: str) -> None:
        await self._request("DELETE", f"/scenes/{scene_id}")

    async def _request(self, method: str, path: str, body: Any = None) -> Any:
        """Send a request and return the decoded JSON response.

        Raises:
            HueDeviceError: If the request fails or the bridge reports an error
        """
        await self.open()
        assert self._session is not None

        url = f"{self.base_url}{path}"
        _LOGGER.debug(
            {
                "class": self.__class__.__name__,
                "method": "_request",
                "values": {"method": method, "path": path, "body": body},
            }
        )
        try:
            async with self._session.request(method, url, json=body) as response:
                response.raise_for_status()
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise HueDeviceError(f"{method} {path} timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise HueDeviceError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise HueDeviceError(f"{method} {path} returned invalid JSON: {e}") from e

        _raise_for_errors(data, f"{method} {path}")
        return data

    def __repr__(self) -> str:
        return f"HueBridge(host={self.host!r}, timeout={self.timeout})"


async def discover_bridge(
    session: aiohttp.ClientSession | None = None,
    url: str = HUE_DISCOVERY_URL,
    timeout: float = 10.0,
) -> str:
    """Find the address of the first Hue bridge on the local network.

    Uses the vendor discovery service, which lists the bridges registered
    from the caller's public address.

    Raises:
        HueConnectionError: If the service is unreachable or lists no bridge
    """
    owns_session = session is None
    if session is None:
        session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout))
    try:
        async with session.get(url) as response:
            response.raise_for_status()
            bridges = await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise HueConnectionError(f"Bridge discovery failed: {e}") from e
    except ValueError as e:
        raise HueConnectionError(f"Bridge discovery returned invalid JSON: {e}") from e
    finally:
        if owns_session:
            await session.close()

    if not isinstance(bridges, list) or not all(isinstance(b, dict) for b in bridges):
        raise HueConnectionError(f"Unexpected discovery response: {bridges!r}")
    if not bridges:
        raise HueConnectionError("No Hue bridge found on the network")

    host = bridges[0].get("internalipaddress")
    if not host:
        raise HueConnectionError(f"Unexpected discovery response: {bridges!r}")
    _LOGGER.debug(
        {
            "method": "discover_bridge",
            "values": {"host": host, "found": len(bridges)},
        }
    )
    return str(host)
