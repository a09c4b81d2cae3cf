"""Media Player platform for Panasonic Viera."""

from __future__ import annotations
import logging

from homeassistant.components.media_player import (
    MediaPlayerEntity,
    MediaPlayerEntityFeature,
    MediaPlayerState,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN
from .coordinator import VieraCoordinator
from .device import STATE_MUTE, STATE_TV_ON, STATE_VOLUME

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities
) -> None:
    """Set up Panasonic Viera media player from a config entry."""
    coordinator: VieraCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([VieraMediaPlayer(coordinator, entry)])


class VieraMediaPlayer(CoordinatorEntity, MediaPlayerEntity):
    """Representation of a Panasonic Viera TV as a Media Player."""

    _attr_should_poll = False
    _attr_supported_features = (
        MediaPlayerEntityFeature.TURN_OFF
        | MediaPlayerEntityFeature.VOLUME_SET
        | MediaPlayerEntityFeature.VOLUME_STEP
        | MediaPlayerEntityFeature.VOLUME_MUTE
    )

    def __init__(self, coordinator: VieraCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator)
        self.coordinator = coordinator
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_media"
        self._attr_name = coordinator.device_name

        self._attr_device_info = {
            "identifiers": {(DOMAIN, entry.entry_id)},
            "manufacturer": "Panasonic",
            "model": "Viera",
            "name": coordinator.device_name,
        }

    # ---------- State ----------
    @property
    def state(self) -> MediaPlayerState | None:
        tv_on = (self.coordinator.data or {}).get(STATE_TV_ON)
        if tv_on is None:
            return None
        return MediaPlayerState.ON if tv_on else MediaPlayerState.OFF

    @property
    def volume_level(self) -> float | None:
        if (volume := (self.coordinator.data or {}).get(STATE_VOLUME)) is not None:
            return max(0.0, min(volume / 100, 1.0))
        return None

    @property
    def volume_step(self) -> float:
        """One remote key press moves the volume by 1 of 100."""
        return 0.01

    @property
    def is_volume_muted(self) -> bool | None:
        return (self.coordinator.data or {}).get(STATE_MUTE)

    # ---------- Commands ----------
    async def async_turn_off(self) -> None:
        """Send the POWER key (a toggle on Viera TVs)."""
        await self.coordinator.async_send_key("power")

    async def async_set_volume_level(self, volume: float) -> None:
        await self.coordinator.async_set_volume(round(volume * 100))

    async def async_volume_up(self) -> None:
        await self.coordinator.async_volume_up()

    async def async_volume_down(self) -> None:
        await self.coordinator.async_volume_down()

    async def async_mute_volume(self, mute: bool) -> None:
        await self.coordinator.async_set_mute(mute)
