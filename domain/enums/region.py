"""Region enumeration for the TFT platforms we ingest."""
from enum import Enum
from typing import Optional


class Region(Enum):
    """Teamfight Tactics servers tracked by the stats pipeline.

    Provides:
    - platform_route: platform host for league/summoner APIs (e.g., euw1)
    - regional_route: continental host for match APIs (e.g., europe)
    - friendly: short human-friendly label for CLI output (e.g., euw)
    """

    NA = "NA"
    EUW = "EUW"
    KR = "KR"
    BR = "BR"
    JP = "JP"

    @property
    def platform_route(self) -> str:
        """Get platform routing value for API calls."""
        return {
            "NA": "na1",
            "EUW": "euw1",
            "KR": "kr",
            "BR": "br1",
            "JP": "jp1",
        }[self.value]

    @property
    def regional_route(self) -> str:
        """Get continental routing for match APIs."""
        return {
            "NA": "americas",
            "BR": "americas",
            "EUW": "europe",
            "KR": "asia",
            "JP": "asia",
        }[self.value]

    @property
    def friendly(self) -> str:
        return self.value.lower()

    @classmethod
    def parse(cls, value: str) -> Optional['Region']:
        """Accept the enum value, the platform route or the friendly label."""
        key = (value or "").strip()
        for region in cls:
            if key.upper() == region.value or key.lower() == region.platform_route:
                return region
        return None

    @classmethod
    def all_regions(cls) -> list['Region']:
        """Get all available regions."""
        return list(cls)
