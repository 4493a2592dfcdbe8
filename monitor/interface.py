"""Primary interface, default gateway and DNS resolver discovery on macOS."""

from __future__ import annotations

from typing import List, Optional

import psutil

from config import COMMANDS, INTERVALS, get_logger
from config.exceptions import SubprocessError
from config.subprocess_cache import cached_run
from monitor.parsers import parse_route_gateway, parse_scutil_nameserver

logger = get_logger(__name__)

GLOBAL_IPV4_KEY = "State:/Network/Global/IPv4"
PRIMARY_INTERFACE_KEY = "PrimaryInterface"


def _primary_from_dynamic_store() -> Optional[str]:
    """Ask configd for the interface carrying the default IPv4 route.

    Raises:
        ImportError: When the SystemConfiguration bindings are unavailable.
    """
    from SystemConfiguration import SCDynamicStoreCopyValue, SCDynamicStoreCreate

    store = SCDynamicStoreCreate(None, "netbar", None, None)
    if store is None:
        return None
    value = SCDynamicStoreCopyValue(store, GLOBAL_IPV4_KEY)
    if not value:
        return None
    name = value.get(PRIMARY_INTERFACE_KEY)
    return str(name) if name else None


def _active_interfaces() -> List[str]:
    """Up, non-loopback interfaces holding an IPv4 address."""
    active = []
    addrs = psutil.net_if_addrs()
    stats = psutil.net_if_stats()

    for iface, addr_list in addrs.items():
        if iface.startswith('lo'):
            continue
        if iface not in stats or not stats[iface].isup:
            continue
        for addr in addr_list:
            if addr.family.name == 'AF_INET' and not addr.address.startswith('127.'):
                active.append(iface)
                break

    return active


class InterfaceResolver:
    """Answers which interface, router and resolver the Mac is using now.

    The primary interface is looked up fresh on every call. Gateway and DNS
    lookups shell out to route/scutil and are cached for a few seconds.
    """

    def __init__(
        self,
        gateway_ttl: float = INTERVALS.GATEWAY_CACHE_SECONDS,
        dns_ttl: float = INTERVALS.DNS_CONFIG_CACHE_SECONDS,
    ) -> None:
        self.gateway_ttl = gateway_ttl
        self.dns_ttl = dns_ttl
        self._dynamic_store_available = True

    def resolve_primary_interface(self) -> Optional[str]:
        """Return the BSD name of the primary interface, or None when offline."""
        if self._dynamic_store_available:
            try:
                return _primary_from_dynamic_store()
            except ImportError:
                logger.info("SystemConfiguration unavailable, using psutil for interface discovery")
                self._dynamic_store_available = False
            except Exception as e:
                logger.warning(f"Dynamic store lookup failed: {e}")
                return None

        try:
            active = _active_interfaces()
        except OSError as e:
            logger.warning(f"Could not list interfaces: {e}")
            return None
        if not active:
            return None
        # Built-in ports first (en0, en1, ...)
        preferred = sorted(active, key=lambda name: (not name.startswith('en'), name))
        return preferred[0]

    def get_default_gateway(self) -> Optional[str]:
        """Return the default route's gateway address."""
        try:
            result = cached_run(
                [COMMANDS.ROUTE, '-n', 'get', 'default'],
                ttl=self.gateway_ttl,
            )
        except SubprocessError as e:
            logger.debug(f"Gateway lookup failed: {e}")
            return None
        if result.returncode != 0:
            return None
        return parse_route_gateway(result.stdout)

    def get_dns_server(self) -> Optional[str]:
        """Return the first configured resolver address."""
        try:
            result = cached_run([COMMANDS.SCUTIL, '--dns'], ttl=self.dns_ttl)
        except SubprocessError as e:
            logger.debug(f"DNS server lookup failed: {e}")
            return None
        if result.returncode != 0:
            return None
        return parse_scutil_nameserver(result.stdout)


__all__ = ["InterfaceResolver"]
