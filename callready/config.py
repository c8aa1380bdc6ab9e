"""
Process settings.

Loaded once at startup and passed into create_app(); request handlers
never read the environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .script import DEFAULT_VOICE

DEFAULT_PORT = 10000
DEFAULT_HOST = "0.0.0.0"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_env_file() -> None:
    """Load .env from the project root or the working directory."""
    env_paths = [
        Path(__file__).parent.parent / ".env",
        Path.cwd() / ".env",
    ]
    for env_path in env_paths:
        if env_path.exists():
            load_dotenv(env_path)
            break
    else:
        load_dotenv()


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    debug: bool = False
    voice: str = DEFAULT_VOICE

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from the environment.

        Raises:
            ValueError: If PORT is set but is not an integer
        """
        load_env_file()
        port = os.getenv("PORT") or str(DEFAULT_PORT)
        return cls(
            port=int(port),
            host=os.getenv("HOST") or DEFAULT_HOST,
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
