from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="FEEDLINE_"
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 9002
    log_level: str = "WARNING"

    # Storage: lists and run state live in config_dir, fetch caches in cache_dir
    config_dir: Path = Path.home() / ".config" / "feedline"
    cache_dir: Path = Path.home() / ".cache" / "feedline"

    # Lists
    default_list: str = "default"
    default_limit: int = 50

    # Fetching
    user_agent: str = "feedline/0.1.0"
    fetch_timeout: float = 30.0
    max_concurrency: int = 16

    # Items from a feed's first successful fetch count as new
    mark_new_on_first_fetch: bool = True

    @property
    def lists_dir(self) -> Path:
        return self.config_dir / "lists"

    @property
    def run_state_path(self) -> Path:
        return self.config_dir / "run_state.json"
