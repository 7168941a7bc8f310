"""Runtime settings, overridable through FUEL_* environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path(__file__).parent.parent.parent / "data"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FUEL_", env_file=".env", extra="ignore")

    data_dir: Path = DEFAULT_DATA_DIR
    db_filename: str = "fuel_onboard.db"

    # Final commit race deadline; a timeout invites the user to retry
    commit_timeout_seconds: float = 5.0
    # Quiet period before a scheduled draft save is sent
    draft_debounce_seconds: float = 0.5
    # Extra attempts for the blocking flush before giving up
    flush_retries: int = 1

    hard_floor_kcal: int = 1200
    soft_floor_male_kcal: int = 1400
    soft_floor_female_kcal: int = 1300

    # Running inside a host that sells plans itself (plan step is skipped)
    constrained_host: bool = False

    log_level: str = "WARNING"

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_filename


settings = Settings()
