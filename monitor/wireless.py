"""Wi-Fi signal and identity via CoreWLAN.

macOS only reveals SSID/BSSID (and, on recent releases, any association
details) to processes the user has granted Location Services. The reader
checks authorization first and reports nothing rather than half-redacted data.
When the primary interface is not Wi-Fi, or the radio is not associated, the
reading is an empty snapshot so stale identity and signal values get cleared.

Example:
    >>> reader = WirelessStatsReader()
    >>> snap = reader.read_wifi(active_interface="en0")
    >>> if snap and snap.associated:
    ...     print(snap.ssid, snap.rssi, snap.band)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from config import NETWORK, get_logger

logger = get_logger(__name__)


class AuthorizationStatus(Enum):
    """Location Services authorization as seen by this process."""
    AUTHORIZED = "authorized"
    DENIED = "denied"
    NOT_DETERMINED = "not_determined"
    UNAVAILABLE = "unavailable"


# CLAuthorizationStatus raw values
_CL_STATUS_MAP = {
    0: AuthorizationStatus.NOT_DETERMINED,
    1: AuthorizationStatus.DENIED,        # restricted
    2: AuthorizationStatus.DENIED,
    3: AuthorizationStatus.AUTHORIZED,    # always
    4: AuthorizationStatus.AUTHORIZED,    # when in use
}


class LocationAuthorization:
    """Thin wrapper over CLLocationManager. Never raises."""

    def __init__(self) -> None:
        self._manager: Any = None
        self._requested = False

    def _get_manager(self):
        if self._manager is None:
            from CoreLocation import CLLocationManager
            self._manager = CLLocationManager.alloc().init()
        return self._manager

    def status(self) -> AuthorizationStatus:
        try:
            from CoreLocation import CLLocationManager
        except ImportError:
            return AuthorizationStatus.UNAVAILABLE

        try:
            manager = self._get_manager()
            if hasattr(manager, "authorizationStatus"):
                raw = manager.authorizationStatus()
            else:
                raw = CLLocationManager.authorizationStatus()
        except Exception as e:
            logger.debug(f"Could not read location authorization: {e}")
            return AuthorizationStatus.UNAVAILABLE

        return _CL_STATUS_MAP.get(int(raw), AuthorizationStatus.DENIED)

    def request(self) -> None:
        """Ask the user for authorization once per process."""
        if self._requested:
            return
        self._requested = True
        try:
            manager = self._get_manager()
            manager.requestAlwaysAuthorization()
            manager.startUpdatingLocation()
            logger.info("Requested Location Services authorization")
        except ImportError:
            logger.debug("CoreLocation unavailable, cannot request authorization")
        except Exception as e:
            logger.warning(f"Location authorization request failed: {e}")


@dataclass
class WifiSnapshot:
    """One reading of the associated Wi-Fi network."""
    ssid: str
    bssid: str
    rssi: int
    noise: int
    tx_rate: float
    channel: int
    band: str
    interface_name: str = ""

    @classmethod
    def disconnected(cls, interface_name: str = "") -> "WifiSnapshot":
        """No Wi-Fi association: identity empty, signal zero."""
        return cls(ssid="", bssid="", rssi=0, noise=0, tx_rate=0.0, channel=0, band="",
                   interface_name=interface_name)

    @property
    def associated(self) -> bool:
        return bool(self.channel or self.rssi)


def band_for_channel(channel: Optional[int]) -> str:
    """Channels above 14 are 5 GHz; 1..14 are 2.4 GHz."""
    if not channel:
        return ""
    return "5 GHz" if channel > NETWORK.HIGHEST_2GHZ_CHANNEL else "2.4 GHz"


def _default_client_factory():
    from CoreWLAN import CWWiFiClient
    return CWWiFiClient.sharedWiFiClient()


class WirelessStatsReader:
    """Reads the current Wi-Fi association from CoreWLAN.

    Args:
        authorization: Object with a status() method. Defaults to
            LocationAuthorization.
        client_factory: Returns a CWWiFiClient-like object.
    """

    def __init__(
        self,
        authorization: Optional[LocationAuthorization] = None,
        client_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.authorization = authorization or LocationAuthorization()
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None
        self._warned_unavailable = False

    def _get_interface(self):
        if self._client is None:
            try:
                self._client = self._client_factory()
            except ImportError:
                if not self._warned_unavailable:
                    logger.info("CoreWLAN unavailable, Wi-Fi statistics disabled")
                    self._warned_unavailable = True
                return None
        return self._client.interface() if self._client is not None else None

    def read_wifi(self, active_interface: Optional[str] = None) -> Optional[WifiSnapshot]:
        """Return the current Wi-Fi reading.

        Returns:
            A disconnected snapshot when the primary interface is not Wi-Fi
            (e.g. Ethernet) or the radio is not associated. None when the
            reading is withheld (no location authorization) or failed, in
            which case callers keep what they had.
        """
        if self.authorization.status() != AuthorizationStatus.AUTHORIZED:
            return None

        try:
            iface = self._get_interface()
            if iface is None:
                return WifiSnapshot.disconnected(active_interface or "")

            name = iface.interfaceName() or ""
            if active_interface and name and name != active_interface:
                return WifiSnapshot.disconnected(active_interface)

            wlan_channel = iface.wlanChannel()
            channel = int(wlan_channel.channelNumber()) if wlan_channel is not None else 0
            rssi = int(iface.rssiValue() or 0)
            if channel == 0 and rssi == 0:
                # Powered on but not associated
                return WifiSnapshot.disconnected(name)

            ssid = iface.ssid() or name or NETWORK.WIFI_PLACEHOLDER_NAME
            return WifiSnapshot(
                ssid=str(ssid),
                bssid=str(iface.bssid() or ""),
                rssi=rssi,
                noise=int(iface.noiseMeasurement() or 0),
                tx_rate=float(iface.transmitRate() or 0.0),
                channel=channel,
                band=band_for_channel(channel),
                interface_name=str(name),
            )
        except Exception as e:
            logger.warning(f"Wi-Fi read failed: {e}")
            return None


__all__ = [
    "AuthorizationStatus",
    "LocationAuthorization",
    "WifiSnapshot",
    "WirelessStatsReader",
    "band_for_channel",
]
