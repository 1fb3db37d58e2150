import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    config_dir: str = os.getenv("POLSKI_LS_CONFIG_DIR", "")
    max_suggestions: int = int(os.getenv("POLSKI_LS_MAX_SUGGESTIONS", "10"))
    max_completions: int = int(os.getenv("POLSKI_LS_MAX_COMPLETIONS", "50"))
    diagnostic_workers: int = int(os.getenv("POLSKI_LS_DIAGNOSTIC_WORKERS", "2"))
    log_level: str = os.getenv("POLSKI_LS_LOG_LEVEL", "INFO")


settings = Settings()
