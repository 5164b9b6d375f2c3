import os
from dataclasses import dataclass

from utils.load_secrets import load_env_vars


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_key: str
    openai_api_key: str
    openai_model_general: str
    model_temperature: float
    trending_limit: int
    vote_totals_stale_seconds: float
    user_votes_stale_seconds: float
    correlations_rpc: str
    log_level: str

    def __init__(self):
        load_env_vars()
        object.__setattr__(self, "supabase_url", os.getenv("SUPABASE_URL", "").strip())
        object.__setattr__(self, "supabase_key", os.getenv("SUPABASE_KEY", "").strip())
        object.__setattr__(
            self, "openai_api_key", os.getenv("OPENAI_API_KEY", "").strip()
        )
        object.__setattr__(
            self,
            "openai_model_general",
            os.getenv("OPENAI_MODEL_GENERAL", "gpt-4o-mini").strip(),
        )
        object.__setattr__(
            self,
            "model_temperature",
            float(os.getenv("MODEL_TEMPERATURE", "0.3").strip()),
        )
        object.__setattr__(
            self, "trending_limit", int(os.getenv("TRENDING_LIMIT", "5").strip())
        )
        object.__setattr__(
            self,
            "vote_totals_stale_seconds",
            float(os.getenv("VOTE_TOTALS_STALE_SECONDS", "15").strip()),
        )
        object.__setattr__(
            self,
            "user_votes_stale_seconds",
            float(os.getenv("USER_VOTES_STALE_SECONDS", "30").strip()),
        )
        object.__setattr__(
            self,
            "correlations_rpc",
            os.getenv("CORRELATIONS_RPC", "problem_correlations").strip(),
        )
        object.__setattr__(self, "log_level", os.getenv("LOG_LEVEL", "INFO").strip())


SETTINGS = Settings()
