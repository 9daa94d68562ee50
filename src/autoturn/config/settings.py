from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

class Settings(BaseSettings):
    # Paths
    data_dir: Path = Path("data")
    db_file: str = "queues.db"

    # Execution pacing (milliseconds)
    pacing_delay_ms: int = 500          # Between dispatched actions
    waypoint_delay_ms: int = 200        # Between waypoints of one move
    roll_delay_ms: int = 500            # Between automatic initiative rolls

    # Grid
    grid_distance: int = 5              # Feet per grid square
    default_speed: int = 30             # Movement budget when a token has none

    # Collaborators
    use_workflow: bool = True           # Prefer a richer item/attack workflow when one is installed
    reveal_hidden_targets: bool = False # GM view: hidden tokens are valid targets

    # Logging
    debug_mode: bool = False
    log_level: str = "INFO"
    log_file: Path | None = None
    enable_color: bool = True

    model_config = SettingsConfigDict(env_file=".env", env_prefix="AUTOTURN_")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_file

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level

settings = Settings()
