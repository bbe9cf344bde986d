"""Shared test factories and fakes.

Match payloads follow the Riot match-v1 shape (metadata.match_id +
info.participants) so they go through the same normalization as real data.
"""

import asyncio
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from core.errors import AuthError  # noqa: E402
from domain.entities import RawMatch  # noqa: E402
from domain.interfaces import IMatchStore  # noqa: E402
from infrastructure.catalog import ReferenceCatalog  # noqa: E402

BRUISER_SORC = [("TFT9_Bruiser", 2, 4), ("TFT9_Sorcerer", 2, 2)]
GUNNER_BASTION = [("TFT9_Gunner", 3, 6), ("TFT9_Bastion", 2, 4)]


# ─── Payload factories ────────────────────────────────────────────

def make_participant(placement, traits=BRUISER_SORC, units=(("TFT9_Ahri", ["Item_A"]),)):
    """Vendor-shaped participant. ``traits`` are (id, tier, num_units) tuples,
    ``units`` are (character_id, [item names]) tuples."""
    return {
        "placement": placement,
        "traits": [{"name": t, "style": tier, "num_units": n} for t, tier, n in traits],
        "units": [{"character_id": u, "itemNames": list(items)} for u, items in units],
    }


def make_match_payload(match_id, participants):
    return {"metadata": {"match_id": match_id}, "info": {"participants": list(participants)}}


def make_raw_match(match_id, participants, region="EUW"):
    return RawMatch.from_api(make_match_payload(match_id, participants), region)


def make_corpus(placements, region="EUW", traits=BRUISER_SORC, units=(("TFT9_Ahri", ["Item_A"]),)):
    """One single-participant match per placement."""
    return [
        make_raw_match(f"{region}_{i}", [make_participant(p, traits, units)], region)
        for i, p in enumerate(placements, start=1)
    ]


def make_catalog():
    return ReferenceCatalog(
        units={
            "TFT9_Ahri": {"name": "Ahri", "icon": "ahri.png", "cost": 4},
            "TFT9_Garen": {"name": "Garen", "icon": "garen.png", "cost": 5},
            "TFT9_Poppy": {"name": "Poppy", "icon": "poppy.png", "cost": 1},
        },
        items={
            "Item_A": {"name": "Deathcap", "icon": "dcap.png", "category": "completed"},
            "Item_B": {"name": "Blue Buff", "icon": "bb.png", "category": "completed"},
        },
        traits={
            "TFT9_Bruiser": {"name": "Bruiser", "icon": "bruiser.png"},
            "TFT9_Sorcerer": {"name": "Sorcerer", "icon": "sorc.png"},
            "TFT9_Gunner": {"name": "Gunner", "icon": "gunner.png"},
            "TFT9_Bastion": {"name": "Bastion", "icon": "bastion.png"},
        },
    )


# ─── Fakes ────────────────────────────────────────────────────────

class FakeStore(IMatchStore):
    """In-memory store that records every call."""

    def __init__(self, fail_status_updates=False):
        self.matches = {}
        self.stats = []
        self.statuses = []
        self.cleanups = []
        self.fail_status_updates = fail_status_updates

    async def save_match(self, match_id, region, payload):
        self.matches.setdefault(match_id, (region, payload))
        return True

    async def get_cached_matches(self, region=None):
        return [p for r, p in self.matches.values() if region in (None, "all") or r == region]

    async def save_processed_stats(self, stats_type, region, payload):
        self.stats.append((stats_type, region, payload))
        return True

    async def get_processed_stats(self, stats_type, region="all"):
        rows = [p for t, r, p in self.stats if t == stats_type and r == region]
        return rows[-1] if rows else None

    async def update_partition_status(self, region, status, error_message=None):
        if self.fail_status_updates:
            raise RuntimeError("store offline")
        self.statuses.append((region, status, error_message))
        return True

    async def cleanup_old_data(self, days_to_keep=7):
        self.cleanups.append(days_to_keep)
        return True


class RecordingSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class FakeApi:
    """Canned Riot responses keyed the way TFTApiClient is called.

    ``delays`` maps a summoner or match id to seconds slept before answering;
    ``failing_summoner`` and ``failing_match`` raise AuthError instead."""

    def __init__(self, entries=None, summoners=None, match_lists=None, matches=None, failing_match=None,
                 failing_summoner=None, delays=None):
        self.entries = entries
        self.summoners = summoners or {}
        self.match_lists = match_lists or {}
        self.matches = matches or {}
        self.failing_match = failing_match
        self.failing_summoner = failing_summoner
        self.delays = delays or {}
        self.match_id_calls = []
        self.match_calls = []
        self.completed = []

    async def get_master_league(self, region):
        return None if self.entries is None else {"entries": self.entries}

    async def get_summoner(self, region, summoner_id):
        await asyncio.sleep(self.delays.get(summoner_id, 0))
        if summoner_id == self.failing_summoner:
            raise AuthError(403, f"/summoners/{summoner_id}")
        self.completed.append(summoner_id)
        return self.summoners.get(summoner_id)

    async def get_match_ids(self, region, puuid, count=20):
        self.match_id_calls.append(puuid)
        return list(self.match_lists.get(puuid, []))

    async def get_match(self, region, match_id):
        self.match_calls.append(match_id)
        await asyncio.sleep(self.delays.get(match_id, 0))
        if match_id == self.failing_match:
            raise AuthError(401, f"/matches/{match_id}")
        self.completed.append(match_id)
        return self.matches.get(match_id)


def players(n):
    """Leaderboard entries (more league points for higher i) and their summoners."""
    entries = [{"summonerId": f"s{i}", "leaguePoints": 100 * i} for i in range(1, n + 1)]
    summoners = {f"s{i}": {"id": f"s{i}", "puuid": f"p{i}"} for i in range(1, n + 1)}
    return entries, summoners


def match_table(ids):
    return {mid: make_match_payload(mid, [make_participant(1)]) for mid in ids}
