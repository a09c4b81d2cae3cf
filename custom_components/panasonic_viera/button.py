"""Button platform for Panasonic Viera."""

from __future__ import annotations
import logging

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.device_registry import DeviceInfo

from .coordinator import VieraCoordinator
from .const import DOMAIN, VIERA_KEYS

_LOGGER = logging.getLogger(__name__)

# Curated subset of RC buttons to expose in HA
RC_BUTTONS: dict[str, str] = {
    "Volume Up": "volume_up",
    "Volume Down": "volume_down",
    "Mute": "mute",
    "Channel Up": "ch_up",
    "Channel Down": "ch_down",
    "Input": "input_key",
    "Menu": "menu",
    "Info": "info",
    "Guide": "epg",
    "Apps": "apps",
    "Home": "home",
    "Red": "red",
    "Green": "green",
    "Yellow": "yellow",
    "Blue": "blue",
    "Right": "right",
    "Left": "left",
    "Up": "up",
    "Down": "down",
    "Enter": "enter",
    "Back": "return_key",
    "Exit": "exit",
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Panasonic Viera buttons from a config entry."""
    coordinator: VieraCoordinator = hass.data[DOMAIN][entry.entry_id]
    entities = [
        VieraButton(coordinator, entry.entry_id, name, key)
        for name, key in RC_BUTTONS.items()
    ]
    async_add_entities(entities)


class VieraButton(ButtonEntity):
    """Representation of a Viera RC button in HA."""

    _attr_has_entity_name = True
    _attr_entity_registry_enabled_default = False  # Hide by default

    def __init__(
        self,
        coordinator: VieraCoordinator,
        entry_id: str,
        name: str,
        rc_key: str,
    ) -> None:
        self._coordinator = coordinator
        self._entry_id = entry_id
        self._rc_key = rc_key
        self._attr_name = name
        self._attr_unique_id = f"{entry_id}_btn_{rc_key}"

    @property
    def device_info(self) -> DeviceInfo:
        """Return Viera device info so buttons group under the TV device."""
        return DeviceInfo(
            identifiers={(DOMAIN, self._entry_id)},
            name=self._coordinator.device_name,
            manufacturer="Panasonic",
            model="Viera",
        )

    async def async_press(self) -> None:
        """Send the RC key associated with this button."""
        keycode = VIERA_KEYS[self._rc_key]
        _LOGGER.debug("Viera Button pressed: %s (NRC %s)", self._attr_name, keycode)
        if await self._coordinator.async_send_key(self._rc_key):
            _LOGGER.debug("%s command succeeded", self._attr_name)
        else:
            _LOGGER.warning("%s command failed", self._attr_name)
