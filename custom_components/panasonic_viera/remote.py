"""Remote platform for Panasonic Viera (to send RC keys)."""

from __future__ import annotations
import asyncio
import logging

from homeassistant.components.remote import RemoteEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import VieraCoordinator
from .device import STATE_TV_ON

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
) -> None:
    """Set up Panasonic Viera remote entity from a config entry."""
    coordinator: VieraCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([VieraRemote(coordinator, entry)])


class VieraRemote(CoordinatorEntity, RemoteEntity):
    """Representation of a Viera remote for sending RC keys."""

    _attr_should_poll = False

    def __init__(self, coordinator: VieraCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator)
        self.coordinator = coordinator
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_remote"
        self._attr_name = f"{coordinator.device_name} Remote"

        self._attr_device_info = {
            "identifiers": {(DOMAIN, entry.entry_id)},
            "manufacturer": "Panasonic",
            "model": "Viera",
            "name": coordinator.device_name,
        }

    @property
    def is_on(self) -> bool | None:
        return (self.coordinator.data or {}).get(STATE_TV_ON)

    async def async_turn_off(self, **kwargs) -> None:
        await self.coordinator.async_send_key("power")

    async def async_send_command(
        self,
        command: str | list[str],
        *,
        device: str | None = None,
        num_repeats: int = 1,
        delay_secs: float = 0.4,
        hold_secs: float | None = None,
    ) -> None:
        """Send one or more key names (or raw key codes) to the TV."""

        # Normalize into a list
        commands = [command] if isinstance(command, str) else command

        for cmd in commands:
            for _ in range(num_repeats):
                _LOGGER.debug("Viera: Sending RC key %s", cmd)
                if not await self.coordinator.async_send_key(cmd):
                    _LOGGER.warning("RC key %s was not delivered", cmd)
                    return
                if delay_secs:
                    await asyncio.sleep(delay_secs)
