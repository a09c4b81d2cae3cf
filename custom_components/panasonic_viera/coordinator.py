"""Coordinator for Panasonic Viera integration."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator

from .commands import Command, KeyCommand, SetMute, SetVolume, command_for
from .const import DEFAULT_NAME, DEFAULT_POLL_INTERVAL, VIERA_KEYS
from .device import (
    STATE_CONNECTION,
    STATE_MUTE,
    STATE_TV_ON,
    STATE_VOLUME,
    VieraDevice,
)
from .exceptions import VieraError
from .network import tcp_probe
from .soap import VieraEndpoint, VieraSoapClient

_LOGGER = logging.getLogger(__name__)

STATE_SESSION = "session_state"


class VieraCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Polls one Viera TV and relays commands to it."""

    def __init__(
        self,
        hass: HomeAssistant,
        endpoint: VieraEndpoint,
        *,
        name: str = DEFAULT_NAME,
        entry: Optional[ConfigEntry] = None,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            name=f"Panasonic Viera Coordinator ({endpoint.host})",
            update_interval=timedelta(seconds=DEFAULT_POLL_INTERVAL),
        )
        self._entry = entry
        self.device_name = name
        self.endpoint = endpoint
        self.soap = VieraSoapClient(endpoint)
        self.device = VieraDevice(self.soap, probe=tcp_probe(endpoint.port), sink=self._set_value)

        # Last values reported by the device session
        self._values: dict[str, Any] = {
            STATE_CONNECTION: None,
            STATE_TV_ON: None,
            STATE_VOLUME: None,
            STATE_MUTE: None,
        }

    def _set_value(self, key: str, value: Any, ack: bool) -> None:
        """State sink for the device session."""
        if self._values.get(key) != value:
            _LOGGER.debug("%s: %s = %s (ack=%s)", self.endpoint.host, key, value, ack)
        self._values[key] = value

    def _snapshot(self) -> dict[str, Any]:
        return {**self._values, STATE_SESSION: self.device.state.value}

    # ---------------------- Polling ----------------------

    async def _async_update_data(self) -> dict[str, Any]:
        """Run one liveness cycle; a TV that is off is not an update failure."""
        await self.device.async_check_status()
        return self._snapshot()

    # ---------------------- Commands ----------------------

    async def async_execute(self, command: Command) -> bool:
        """Run a command and publish the resulting state."""
        try:
            ok = await self.device.async_execute(command)
        except VieraError as err:
            _LOGGER.error("Command %r failed on %s: %s", command, self.endpoint.host, err)
            ok = False
        self.async_set_updated_data(self._snapshot())
        return ok

    async def async_send_command(self, name: str, value: Any = None) -> bool:
        """Run a host-level named command (key name, mute, volume)."""
        try:
            command = command_for(name, value)
        except VieraError as err:
            _LOGGER.error("Invalid command %s(%r): %s", name, value, err)
            return False
        return await self.async_execute(command)

    async def async_send_key(self, key: str) -> bool:
        return await self.async_execute(KeyCommand(VIERA_KEYS.get(key.lower(), key)))

    async def async_set_volume(self, volume: int) -> bool:
        try:
            command = SetVolume(volume)
        except VieraError as err:
            _LOGGER.error("Invalid volume %r: %s", volume, err)
            return False
        return await self.async_execute(command)

    async def async_set_mute(self, mute: bool) -> bool:
        return await self.async_execute(SetMute(mute))

    async def async_volume_up(self) -> bool:
        return await self.async_send_key("volume_up")

    async def async_volume_down(self) -> bool:
        return await self.async_send_key("volume_down")

    # ---------------------- Close out / Clean Up ----------------------

    async def async_close(self) -> None:
        await self.soap.async_close()
