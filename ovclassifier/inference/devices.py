"""
Compute device enumeration.

Lists the devices the OpenVINO runtime can compile for, minus the
accelerator categories the pipeline does not support.
"""

import logging
from typing import List

from .errors import DeviceIndexOutOfRange

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_DEVICE = "GNA"


class DeviceEnumerator:
    """Builds and caches the list of usable compute devices.

    The list is rebuilt from scratch by every ``list_devices()`` call;
    ``device_name_at()`` only reads the last built list.

    Example:
        >>> devices = DeviceEnumerator(ov.Core())
        >>> devices.list_devices()
        ['CPU', 'GPU']
        >>> devices.device_name_at(1)
        'GPU'

    Attributes:
        excluded: Case-sensitive substring marking unsupported devices
    """

    def __init__(self, core, excluded: str = DEFAULT_EXCLUDED_DEVICE):
        """Initialize the enumerator.

        Args:
            core: OpenVINO ``Core`` (or any object exposing
                  ``available_devices``)
            excluded: Devices whose name contains this substring are
                      skipped
        """
        self._core = core
        self.excluded = excluded
        self._devices: List[str] = []

    def list_devices(self) -> List[str]:
        """Query the runtime and rebuild the device list.

        Returns:
            Usable device names in runtime order
        """
        devices = [
            name for name in self._core.available_devices
            if self.excluded not in name
        ]
        self._devices = devices
        logger.debug(f"Enumerated {len(devices)} device(s): {devices}")
        return list(devices)

    def device_name_at(self, index: int) -> str:
        """Name of the device at ``index`` in the last built list.

        Raises:
            DeviceIndexOutOfRange: If ``index`` is outside the list
        """
        if not 0 <= index < len(self._devices):
            raise DeviceIndexOutOfRange(index, len(self._devices))
        return self._devices[index]

    @property
    def devices(self) -> List[str]:
        """Last built list, without re-enumerating."""
        return list(self._devices)

    def __len__(self) -> int:
        return len(self._devices)
