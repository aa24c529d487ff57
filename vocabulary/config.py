from __future__ import annotations
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    app_env: str = 'dev'
    log_level: str = 'INFO'
    # JSON export of the word table; the demo seed store is used when unset
    dictionary_path: Optional[str] = None
    refresh_interval_seconds: float = 0.0
    search_budget_ms: float = 200.0
    cors_origins: List[str] = ['*']

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'Settings':
        # variables already set in the environment win over the .env file
        load_dotenv(env_file)
        origins = os.getenv('CORS_ORIGINS', '*')
        return cls(
            app_env=os.getenv('APP_ENV', 'dev'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            dictionary_path=os.getenv('DICTIONARY_PATH') or None,
            refresh_interval_seconds=float(os.getenv('REFRESH_INTERVAL_SECONDS', '0') or '0'),
            search_budget_ms=float(os.getenv('SEARCH_BUDGET_MS', '200') or '200'),
            cors_origins=[o.strip() for o in origins.split(',') if o.strip()],
        )
