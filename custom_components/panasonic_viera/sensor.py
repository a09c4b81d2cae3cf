"""Sensor platform for Panasonic Viera."""

from __future__ import annotations

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import STATE_SESSION, VieraCoordinator
from .const import DOMAIN
from .device import DeviceState


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up Panasonic Viera sensors from a config entry."""
    coordinator: VieraCoordinator = hass.data[DOMAIN][entry.entry_id]
    async_add_entities([SessionStateSensor(coordinator, entry)])


class SessionStateSensor(CoordinatorEntity, SensorEntity):
    """Sensor representing the session state with the TV."""

    _attr_has_entity_name = True
    _attr_name = "Session State"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.value for state in DeviceState]

    def __init__(self, coordinator: VieraCoordinator, entry: ConfigEntry) -> None:
        super().__init__(coordinator)
        self._entry_id = entry.entry_id
        self._attr_unique_id = f"{entry.entry_id}_session_state"
        self._attr_device_info = {
            "identifiers": {(DOMAIN, entry.entry_id)},
            "name": coordinator.device_name,
            "manufacturer": "Panasonic",
            "model": "Viera",
        }

    @property
    def native_value(self) -> str | None:
        """Return the current session state."""
        return (self.coordinator.data or {}).get(STATE_SESSION)
