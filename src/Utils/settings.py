from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from Utils.constants import (
    DEFAULT_INPUT_FILE,
    DEFAULT_JOIN_TIMEOUT,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_WORKERS,
)


class PipelineSettings(BaseSettings):
    input_path: str = DEFAULT_INPUT_FILE
    output_path: str = DEFAULT_OUTPUT_FILE

    n_workers: int = Field(default=DEFAULT_WORKERS, ge=1)
    queue_size: int = Field(default=DEFAULT_QUEUE_SIZE, ge=1)
    join_timeout: float = Field(default=DEFAULT_JOIN_TIMEOUT, gt=0)

    transform: str = "stem"
    preserve_order: bool = False
    dlq_dir: Optional[str] = None

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="STEMMER_", env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> PipelineSettings:
    return PipelineSettings()
