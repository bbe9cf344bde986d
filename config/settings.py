"""Application settings and configuration."""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

from core.errors import ConfigError

ENV_PATH = Path(__file__).resolve().parent / '.env'
load_dotenv(dotenv_path=ENV_PATH)


def _int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Settings:
    """
    Riot rate limits are enforced per routing host (na1, europe, ...).
    A development key allows 20 req/s and 100 req/120s on each host,
    so every host gets its own pair of windows.
    """

    RIOT_API_KEY: str = os.getenv('RIOT_API_KEY', '')

    # ── Rate limits (short / long window per routing host) ───────────────
    SHORT_WINDOW_MS:       int = 1_000
    SHORT_WINDOW_REQUESTS: int = _int('SHORT_WINDOW_REQUESTS', 20)
    LONG_WINDOW_MS:        int = 120_000
    LONG_WINDOW_REQUESTS:  int = _int('LONG_WINDOW_REQUESTS', 100)

    RATE_LIMIT_PARTITIONS: tuple = (
        'na1', 'euw1', 'kr', 'br1', 'jp1', 'americas', 'europe', 'asia',
    )
    DEFAULT_PARTITION: str = 'na1'

    # ── HTTP ───────────────────────────────────────────────────────────────
    REQUEST_TIMEOUT_MS:  int = _int('REQUEST_TIMEOUT_MS', 10_000)
    MAX_RETRIES:         int = _int('MAX_RETRIES', 3)
    RETRY_BASE_DELAY_MS: int = _int('RETRY_BASE_DELAY_MS', 1_000)
    RETRY_BACKOFF:       float = 2.0

    LEAGUE_TIMEOUT_MS:   int = 15_000
    SUMMONER_TIMEOUT_MS: int = 8_000
    SUMMONER_RETRIES:    int = 2
    MATCH_TIMEOUT_MS:    int = 8_000
    MATCH_RETRIES:       int = 2

    # ── Ingestion ──────────────────────────────────────────────────────────
    # Sample more players than needed; a failed summoner lookup must not starve the run.
    LEADERBOARD_SAMPLE_SIZE:  int = _int('LEADERBOARD_SAMPLE_SIZE', 4)
    MATCH_LIST_CIRCUIT_LIMIT: int = _int('MATCH_LIST_CIRCUIT_LIMIT', 2)
    IDS_PER_PLAYER:           int = _int('IDS_PER_PLAYER', 20)
    MATCH_BATCH_SIZE:         int = _int('MATCH_BATCH_SIZE', 4)
    INTER_BATCH_DELAY_MS:     int = _int('INTER_BATCH_DELAY_MS', 150)

    MATCHES_PER_REGION:      int = _int('MATCHES_PER_REGION', 30)
    MIN_REGION_MATCHES:      int = 5
    MIN_GLOBAL_MATCHES:      int = 20
    STATS_RETENTION_DAYS:    int = _int('STATS_RETENTION_DAYS', 7)

    DISABLED_REGIONS: set = set(
        r.strip().upper()
        for r in os.getenv('DISABLED_REGIONS', '').split(',')
        if r.strip()
    )

    # ── Aggregation ────────────────────────────────────────────────────────
    PLACEMENT_ZERO_FILL: bool = os.getenv('PLACEMENT_ZERO_FILL', 'false').strip().lower() == 'true'

    # ── Paths ──────────────────────────────────────────────────────────────
    BASE_DIR:    Path = Path(__file__).resolve().parent.parent
    DATA_DIR:    Path = BASE_DIR / 'data'
    DB_DIR:      Path = DATA_DIR / 'db'
    MAPPING_DIR: Path = Path(os.getenv('MAPPING_DIR', '')) if os.getenv('MAPPING_DIR') else DATA_DIR / 'mapping'
    LOG_DIR:     Path = DATA_DIR / 'logs'

    DB_FILE_NAME: str           = 'tft_stats.sqlite'
    LOG_LEVEL:    Optional[str] = os.getenv('LOG_LEVEL', 'INFO')

    @classmethod
    def validate(cls) -> None:
        if not cls.RIOT_API_KEY:
            raise ConfigError("RIOT_API_KEY must be set in config/.env")

    @classmethod
    def create_directories(cls) -> None:
        cls.DB_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)

    @classmethod
    def db_path(cls) -> Path:
        return cls.DB_DIR / cls.DB_FILE_NAME


settings = Settings()
