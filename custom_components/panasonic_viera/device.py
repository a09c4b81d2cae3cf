"""Per-device session for a Panasonic Viera TV.

Owns the liveness cycle (probe, connect, query) and serializes every
connect+act sequence against the TV, which does not tolerate concurrent
requests on the same session.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Optional

from .commands import (
    Command,
    GetMute,
    GetVolume,
    KeyCommand,
    SetMute,
    SetVolume,
    key_event,
)
from .exceptions import AuthenticationFailed, TransportError, TransportTimeout, VieraError
from .network import ReachabilityProbe
from .soap import VieraSoapClient

_LOGGER = logging.getLogger(__name__)

STATE_CONNECTION = "connection"
STATE_TV_ON = "tv_on"
STATE_VOLUME = "volume"
STATE_MUTE = "mute"

VOLUME_KEYS = {key_event("VOLUP"), key_event("VOLDOWN")}

# sink(key, value, acknowledged)
StateSink = Callable[[str, Any, bool], None]


class DeviceState(StrEnum):
    """Session state of one TV."""

    UNKNOWN = "unknown"
    PROBING = "probing"
    ALIVE = "alive"
    UNREACHABLE = "unreachable"
    CONNECTING = "connecting"
    READY = "ready"
    AUTH_FAILED = "auth_failed"


@dataclass
class SessionState:
    state: DeviceState = DeviceState.UNKNOWN
    connected: bool = False
    last_known_alive: bool = False
    tv_on: Optional[bool] = None
    last_volume: Optional[int] = None
    last_mute: Optional[bool] = None


class VieraDevice:
    """Long-lived session with one TV, cycled by an external poller."""

    def __init__(
        self,
        client: VieraSoapClient,
        *,
        probe: ReachabilityProbe,
        sink: Optional[StateSink] = None,
    ) -> None:
        self.client = client
        self.session = SessionState()
        self._probe = probe
        self._sink = sink
        self._lock = asyncio.Lock()

    @property
    def host(self) -> str:
        return self.client.host

    @property
    def state(self) -> DeviceState:
        return self.session.state

    @property
    def busy(self) -> bool:
        """True while a connect+act sequence holds the device."""
        return self._lock.locked()

    # ---------------------- Reporting ----------------------

    def _report(self, key: str, value: Any) -> None:
        if self._sink is not None:
            self._sink(key, value, True)

    def _set_alive(self, alive: bool) -> None:
        self.session.last_known_alive = alive
        self._report(STATE_CONNECTION, alive)

    def _set_tv_on(self, tv_on: bool) -> None:
        self.session.tv_on = tv_on
        self._report(STATE_TV_ON, tv_on)

    def _set_volume(self, volume: Optional[int]) -> None:
        self.session.last_volume = volume
        self._report(STATE_VOLUME, volume)

    def _set_mute(self, mute: Optional[bool]) -> None:
        self.session.last_mute = mute
        self._report(STATE_MUTE, mute)

    def _forget(self) -> None:
        """Reset everything learned from the TV to unknown."""
        self.session.connected = False
        self._set_volume(None)
        self._set_mute(None)

    # ---------------------- Liveness cycle ----------------------

    async def async_check_status(self) -> bool:
        """Probe the TV and, if it is reachable, refresh mute and volume.

        Returns False when the cycle was skipped because a command is in
        flight. Failures are logged and reflected in the reported state,
        never raised, so the poller keeps running against a TV that is off.
        """
        if self.busy:
            _LOGGER.debug("Command in flight for %s, skipping status check", self.host)
            return False

        self.session.state = DeviceState.PROBING
        try:
            alive = bool(await self._probe(self.host))
        except Exception as err:  # pylint: disable=broad-except
            _LOGGER.debug("Reachability probe for %s failed: %s", self.host, err)
            alive = False

        self._set_alive(alive)
        if not alive:
            _LOGGER.debug("%s is unreachable", self.host)
            self.session.state = DeviceState.UNREACHABLE
            self._set_tv_on(False)
            self._forget()
            return True

        self.session.state = DeviceState.ALIVE
        async with self._lock:
            try:
                await self._async_connect()
            except VieraError as err:
                _LOGGER.warning("Unable to connect to %s: %s", self.host, err)
                self._set_tv_on(False)
                self._forget()
                return True
            await self._async_refresh()
        return True

    async def _async_refresh(self) -> None:
        """Query mute and volume; the TV counts as on if any query answers."""
        answered = False

        try:
            self._set_mute(await self.client.async_get_mute())
            answered = True
        except VieraError as err:
            _LOGGER.debug("GetMute on %s failed: %s", self.host, err)
            self._set_mute(None)

        try:
            self._set_volume(await self.client.async_get_volume())
            answered = True
        except VieraError as err:
            _LOGGER.debug("GetVolume on %s failed: %s", self.host, err)
            self._set_volume(None)

        if not answered:
            _LOGGER.debug("%s did not answer render queries, assuming it is off", self.host)
        self._set_tv_on(answered)

    async def _async_connect(self) -> None:
        self.session.state = DeviceState.CONNECTING
        self.session.connected = False
        try:
            await self.client.async_connect()
        except AuthenticationFailed:
            self.session.state = DeviceState.AUTH_FAILED
            raise
        except TransportError:
            self.session.state = DeviceState.UNREACHABLE
            raise
        self.session.connected = True
        self.session.state = DeviceState.READY

    # ---------------------- Commands ----------------------

    async def async_execute(
        self,
        command: Command,
        *,
        confirm: bool = True,
        timeout: Optional[float] = None,
    ) -> bool:
        """Connect and run one command against the TV.

        Returns False without touching the network when the last probe found
        the TV unreachable. With confirm, a set command (or a volume key) is
        followed by the matching get so the reported state reflects the TV.
        Errors are logged and re-raised; TransportTimeout is raised when the
        optional caller timeout elapses.
        """
        if not self.session.last_known_alive:
            _LOGGER.debug("%s is not reachable, dropping %r", self.host, command)
            return False

        async with self._lock:
            try:
                if timeout is None:
                    await self._async_run(command, confirm)
                else:
                    async with asyncio.timeout(timeout):
                        await self._async_run(command, confirm)
            except TimeoutError as err:
                _LOGGER.error("%r on %s timed out after %ss", command, self.host, timeout)
                raise TransportTimeout(f"{command!r} timed out after {timeout}s") from err
            except TransportError as err:
                _LOGGER.error("%r on %s failed: %s", command, self.host, err)
                self._set_tv_on(False)
                raise
            except VieraError as err:
                _LOGGER.error("%r on %s failed: %s", command, self.host, err)
                raise
        return True

    async def _async_run(self, command: Command, confirm: bool) -> None:
        await self._async_connect()

        read_volume = read_mute = False
        match command:
            case KeyCommand(key=key):
                await self.client.async_send_key(key)
                read_volume = confirm and key_event(key) in VOLUME_KEYS
            case SetVolume(volume=volume):
                await self.client.async_set_volume(volume)
                read_volume = confirm
            case SetMute(mute=mute):
                await self.client.async_set_mute(mute)
                read_mute = confirm
            case GetVolume():
                read_volume = True
            case GetMute():
                read_mute = True

        if read_volume:
            self._set_volume(await self.client.async_get_volume())
        if read_mute:
            self._set_mute(await self.client.async_get_mute())
        if read_volume or read_mute:
            self._set_tv_on(True)
