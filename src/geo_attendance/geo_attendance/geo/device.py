from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(frozen=True)
class DeviceInfo:
    """Descriptor of the device that produced an attendance record."""

    user_agent: str = ""
    platform: str = ""
    language: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"userAgent": self.user_agent, "platform": self.platform, "language": self.language}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "DeviceInfo":
        data = data or {}
        return cls(
            user_agent=str(data.get("userAgent") or ""),
            platform=str(data.get("platform") or ""),
            language=str(data.get("language") or ""),
        )

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "DeviceInfo":
        """Build the descriptor from request headers.

        Platform comes from the ``Sec-CH-UA-Platform`` client hint (quoted),
        language from the first ``Accept-Language`` tag.
        """
        platform = (headers.get("Sec-CH-UA-Platform") or "").strip().strip('"')
        accept_language = headers.get("Accept-Language") or ""
        language = accept_language.split(",")[0].split(";")[0].strip()
        return cls(
            user_agent=headers.get("User-Agent") or "",
            platform=platform,
            language=language,
        )
