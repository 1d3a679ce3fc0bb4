"""
Conditioning Step 0: Configuration

Data and artifact locations come from the environment (prod) / .env (local).
Use a Settings object so every run logs the same config.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class Settings:
    """Where report inputs live and where outputs go"""
    data_dir: str = "data"
    artifacts_dir: str = "artifacts"

    def data_path(self) -> Path:
        return Path(self.data_dir)

    def artifacts_path(self) -> Path:
        return Path(self.artifacts_dir)


def load_settings() -> Settings:
    """
    Load settings from environment.

    Reads TSREPORTS_DATA_DIR and TSREPORTS_ARTIFACTS_DIR from a .env file or
    environment variables; both are optional.
    """
    load_dotenv()

    return Settings(
        data_dir=os.getenv("TSREPORTS_DATA_DIR", "data"),
        artifacts_dir=os.getenv("TSREPORTS_ARTIFACTS_DIR", "artifacts"),
    )
