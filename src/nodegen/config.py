"""Runtime settings read from the environment."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel

DEFAULT_BUNDLER = "npx @apidevtools/swagger-cli"


class Settings(BaseModel):
    node_color: str = os.getenv("NODEGEN_NODE_COLOR", "#ffffff")
    work_dir: Path = Path(os.getenv("NODEGEN_WORK_DIR", ".nodegen"))
    bundler: str = os.getenv("NODEGEN_BUNDLER", DEFAULT_BUNDLER)
    log_level: str = os.getenv("NODEGEN_LOG_LEVEL", "WARNING")

    @property
    def deref_path(self) -> Path:
        """Fixed working path of the dereferenced document."""
        return self.work_dir / "_deref.json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
