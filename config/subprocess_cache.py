"""Subprocess execution with caching and safety features.

Every external utility the engine orchestrates (ping, route, scutil, nc and
networkQuality) is launched through this module. Gateway and resolver lookups
change rarely, so they go through a short-lived cache; probes always run fresh.

Security Note:
    All commands are validated against ALLOWED_SUBPROCESS_COMMANDS and run
    with shell=False, so host names from the system configuration are never
    interpreted by a shell.

Usage:
    from config.subprocess_cache import safe_run, get_subprocess_cache

    # Fresh execution (probes)
    result = safe_run(['/sbin/ping', '-c', '5', '-W', '1000', '1.1.1.1'])

    # Cached execution (discovery)
    cache = get_subprocess_cache()
    result = cache.run(['/sbin/route', '-n', 'get', 'default'], ttl=5.0)
"""

# nosec B404 - subprocess usage is required and validated via allowlist
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from config.constants import ALLOWED_SUBPROCESS_COMMANDS, INTERVALS
from config.exceptions import SubprocessError
from config.logging_config import get_logger, log_subprocess_call

logger = get_logger(__name__)


@dataclass
class CachedResult:
    """Cached subprocess result with metadata."""

    result: subprocess.CompletedProcess
    timestamp: float
    duration_ms: float

    def is_expired(self, ttl: float) -> bool:
        return (time.time() - self.timestamp) >= ttl


class SubprocessCache:
    """Thread-safe TTL cache in front of subprocess.run().

    Only successful runs are cached, so a transient route or scutil failure
    is retried on the next lookup.

    Attributes:
        default_ttl: Default time-to-live for cached results in seconds.
        max_cache_size: Maximum number of cached results to keep.
    """

    def __init__(self, default_ttl: float = 5.0, max_cache_size: int = 20):
        self.default_ttl = default_ttl
        self.max_cache_size = max_cache_size
        self._cache: Dict[Tuple[str, ...], CachedResult] = {}
        self._lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "errors": 0,
        }

    def _make_key(self, cmd: List[str]) -> Tuple[str, ...]:
        return tuple(cmd)

    def _evict(self) -> None:
        """Drop stale entries, then the oldest ones beyond max_cache_size."""
        stale = [
            key for key, cached in self._cache.items()
            if cached.is_expired(self.default_ttl * 2)
        ]
        for key in stale:
            del self._cache[key]

        overflow = len(self._cache) - self.max_cache_size
        if overflow > 0:
            oldest = sorted(self._cache.items(), key=lambda item: item[1].timestamp)
            for key, _ in oldest[:overflow]:
                del self._cache[key]

    def run(
        self,
        cmd: List[str],
        ttl: Optional[float] = None,
        bypass_cache: bool = False,
        timeout: Optional[float] = None,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Run a command, answering from the cache while the entry is fresh.

        Args:
            cmd: Command and arguments as list.
            ttl: Time-to-live for the cached result. Uses default if not specified.
            bypass_cache: If True, always run the command fresh.
            timeout: Command timeout in seconds.
            **kwargs: Additional arguments passed to subprocess.run().

        Returns:
            subprocess.CompletedProcess with command output.

        Raises:
            SubprocessError: If the command cannot be launched or times out.
        """
        ttl = ttl if ttl is not None else self.default_ttl
        timeout = timeout or INTERVALS.SUBPROCESS_TIMEOUT_SECONDS
        key = self._make_key(cmd)

        if not bypass_cache:
            with self._lock:
                cached = self._cache.get(key)
                if cached is not None and not cached.is_expired(ttl):
                    self._stats["hits"] += 1
                    logger.debug(f"Cache hit for: {cmd[0]}")
                    return cached.result

        with self._lock:
            self._stats["misses"] += 1
        start_time = time.time()

        try:
            kwargs.setdefault("capture_output", True)
            kwargs.setdefault("text", True)
            kwargs["timeout"] = timeout

            result = subprocess.run(cmd, **kwargs)  # nosec B603 - Commands validated via allowlist
        except subprocess.TimeoutExpired as e:
            self._record_error()
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(f"Command timed out after {duration_ms:.0f}ms: {cmd}")
            raise SubprocessError(
                f"Command timed out after {timeout}s", command=cmd, details={"timeout": timeout}
            ) from e
        except FileNotFoundError as e:
            self._record_error()
            logger.error(f"Command not found: {cmd[0]}")
            raise SubprocessError(f"Command not found: {cmd[0]}", command=cmd) from e
        except OSError as e:
            self._record_error()
            logger.error(f"Failed to launch {cmd[0]}: {e}")
            raise SubprocessError(f"Failed to launch: {e}", command=cmd) from e

        duration_ms = (time.time() - start_time) * 1000
        log_subprocess_call(
            logger, cmd, result.returncode, duration_ms, success=(result.returncode == 0)
        )

        if not bypass_cache and result.returncode == 0:
            with self._lock:
                self._cache[key] = CachedResult(
                    result=result, timestamp=time.time(), duration_ms=duration_ms
                )
                self._evict()

        return result

    def _record_error(self) -> None:
        with self._lock:
            self._stats["errors"] += 1

    def invalidate(self, cmd: Optional[List[str]] = None) -> None:
        """Invalidate cached results.

        Args:
            cmd: Specific command to invalidate. If None, clears entire cache.
        """
        with self._lock:
            if cmd is None:
                self._cache.clear()
                logger.debug("Cleared entire subprocess cache")
            else:
                self._cache.pop(self._make_key(cmd), None)

    def get_stats(self) -> dict:
        """Get cache statistics."""
        with self._lock:
            total = self._stats["hits"] + self._stats["misses"]
            hit_rate = (self._stats["hits"] / total * 100) if total > 0 else 0
            return {
                **self._stats,
                "cache_size": len(self._cache),
                "hit_rate_percent": round(hit_rate, 1),
            }


# Global cache instance
_global_cache: Optional[SubprocessCache] = None
_global_cache_lock = threading.Lock()


def get_subprocess_cache() -> SubprocessCache:
    """Get or create the global subprocess cache."""
    global _global_cache
    with _global_cache_lock:
        if _global_cache is None:
            _global_cache = SubprocessCache()
        return _global_cache


def check_command_allowed(cmd: List[str]) -> None:
    """Raise SubprocessError unless the command's basename is allowlisted."""
    if not cmd:
        raise SubprocessError("Empty command", command=cmd)

    base_cmd = cmd[0]
    if "/" in base_cmd:
        base_cmd = Path(base_cmd).name

    if base_cmd not in ALLOWED_SUBPROCESS_COMMANDS:
        raise SubprocessError(
            f"Command not in allowlist: {base_cmd}",
            command=cmd,
            details={"allowed": sorted(ALLOWED_SUBPROCESS_COMMANDS)},
        )


def safe_run(
    cmd: List[str], timeout: Optional[float] = None, check_allowed: bool = True, **kwargs
) -> subprocess.CompletedProcess:
    """Run a subprocess command with safety checks and no caching.

    Args:
        cmd: Command and arguments as list.
        timeout: Command timeout in seconds.
        check_allowed: If True, validate command is in allowlist.
        **kwargs: Additional arguments passed to subprocess.run().

    Returns:
        subprocess.CompletedProcess with command output.

    Raises:
        SubprocessError: If command is not allowed, cannot be launched, or times out.

    Example:
        >>> result = safe_run(['/usr/sbin/scutil', '--dns'])
        >>> if result.returncode == 0:
        ...     print(result.stdout)
    """
    if check_allowed:
        check_command_allowed(cmd)
    elif not cmd:
        raise SubprocessError("Empty command", command=cmd)

    return get_subprocess_cache().run(cmd, ttl=0, bypass_cache=True, timeout=timeout, **kwargs)


def cached_run(
    cmd: List[str], ttl: float, timeout: Optional[float] = None, **kwargs
) -> subprocess.CompletedProcess:
    """Run an allowlisted command through the global cache.

    Raises:
        SubprocessError: If command is not allowed, cannot be launched, or times out.
    """
    check_command_allowed(cmd)
    return get_subprocess_cache().run(cmd, ttl=ttl, timeout=timeout, **kwargs)
