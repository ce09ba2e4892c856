from __future__ import annotations

import locale
import os
import platform
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class DeviceMetadata:
    user_agent: str
    device_model: str
    os_version: str
    screen_resolution: str
    timezone: str
    language: str | None


class DeviceMetadataProvider(Protocol):
    def collect(self) -> DeviceMetadata: ...


class StaticDeviceMetadataProvider:
    def __init__(self, metadata: DeviceMetadata) -> None:
        self._metadata = metadata

    def collect(self) -> DeviceMetadata:
        return self._metadata


class HostDeviceMetadataProvider:
    """Describes the host running the SDK, for desktop and server embeddings."""

    def __init__(self, *, screen_resolution: str | None = None) -> None:
        self._screen_resolution = screen_resolution

    def collect(self) -> DeviceMetadata:
        os_version = f"{platform.system() or UNKNOWN} {platform.release()}".strip()
        return DeviceMetadata(
            user_agent=f"{os_version} Python/{platform.python_version()}",
            device_model=platform.machine() or platform.node() or UNKNOWN,
            os_version=os_version,
            screen_resolution=self._screen_resolution or UNKNOWN,
            timezone=_local_timezone_name(),
            language=_local_language(),
        )


def _local_timezone_name() -> str:
    configured = os.environ.get("TZ", "").strip()
    if configured:
        return configured.lstrip(":")
    local_tz = datetime.now().astimezone().tzinfo
    name = getattr(local_tz, "key", None) or (local_tz.tzname(None) if local_tz else None)
    return name or "UTC"


def _local_language() -> str | None:
    language_code, _ = locale.getlocale()
    if not language_code or language_code in {"C", "POSIX"}:
        return None
    return language_code.split("_", 1)[0].lower()
