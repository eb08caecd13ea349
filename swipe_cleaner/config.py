"""Application settings."""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8788
    debug: bool = False
    media_source: str = "filesystem"
    library_dir: Path = Path.home() / "Pictures"
    state_dir: Path = Path.home() / ".swipe-cleaner"
    trash_dir: Optional[Path] = None  # defaults to <state_dir>/trash
    processed_limit: int = 12000
    processed_key: str = "processedAssetIdentifiers"
    delete_delay_seconds: float = 3.5
    delete_batch_threshold: int = 15
    notice_dismiss_seconds: float = 3.5
    max_preview_size_mb: int = 50

    model_config = {"env_prefix": "SWIPE_"}

    @property
    def state_file(self) -> Path:
        return self.state_dir / "state.json"

    @property
    def resolved_trash_dir(self) -> Path:
        return self.trash_dir or self.state_dir / "trash"


settings = Settings()
