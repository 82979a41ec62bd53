"""Application configuration via Pydantic Settings."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment variables and .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Paths
    output_dir: Path = Path(__file__).resolve().parent.parent.parent / "output"

    # Simulation
    n_simulations: int = 1000
    random_seed: int = 111653
    n_jobs: int = 1
    max_half_inning_steps: int = 1000

    # Estimation
    row_sum_tolerance: float = 1e-9
    drop_null_transitions: bool = True
    drop_dead_end_transitions: bool = False

    # Event filtering
    regulation_innings: int = 9
    doubleheader_innings: int = 7

    # Reporting
    innings_per_game: int = 9
    log_level: str = "INFO"


settings = Settings()
