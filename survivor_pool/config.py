"""Runtime settings read from the environment (and a local ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

ESPN_SCOREBOARD_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl/scoreboard"
FFTODAY_SCHEDULE_URL = "https://www.fftoday.com/nfl/schedule.php"


@dataclass(frozen=True)
class Settings:
    data_path: str = "survivor_data.json"
    season: int = 2025
    espn_base_url: str = ESPN_SCOREBOARD_URL
    cache_ttl: float = 900.0
    cache_size: int = 64
    http_timeout: float = 10.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 5000


def load_settings() -> Settings:
    load_dotenv()
    env = os.environ
    defaults = Settings()
    return Settings(
        data_path=env.get("SURVIVOR_DATA_PATH", defaults.data_path),
        season=int(env.get("SURVIVOR_SEASON", defaults.season)),
        espn_base_url=env.get("ESPN_BASE_URL", defaults.espn_base_url),
        cache_ttl=float(env.get("RESULTS_CACHE_TTL", defaults.cache_ttl)),
        cache_size=int(env.get("RESULTS_CACHE_SIZE", defaults.cache_size)),
        http_timeout=float(env.get("HTTP_TIMEOUT", defaults.http_timeout)),
        log_level=env.get("LOG_LEVEL", defaults.log_level).upper(),
        host=env.get("HOST", defaults.host),
        port=int(env.get("PORT", defaults.port)),
    )
