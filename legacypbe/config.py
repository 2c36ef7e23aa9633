from __future__ import annotations

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from .cipher.registry import PBEFamily
from .errors import ConfigError


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Key derivation
    max_iterations: int = Field(default=1_000_000, ge=1, description="Upper bound on PBE iteration counts")
    default_iterations: int = Field(default=2048, ge=1)
    salt_size: int = Field(default=8, ge=1, le=64)
    default_family: PBEFamily = Field(default=PBEFamily.SHA1_3DES)

    # Reproducibility
    global_seed: int = Field(default=1337)

    reports_dir: str = Field(default="reports")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    # pydantic's ValidationError is a ValueError too
    try:
        return Settings(
            max_iterations=int(os.getenv("PBE_MAX_ITERATIONS", "1000000")),
            default_iterations=int(os.getenv("PBE_DEFAULT_ITERATIONS", "2048")),
            salt_size=int(os.getenv("PBE_SALT_SIZE", "8")),
            default_family=os.getenv("PBE_DEFAULT_FAMILY", PBEFamily.SHA1_3DES.value),
            global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
            reports_dir=os.getenv("PBE_REPORTS_DIR", "reports"),
        )
    except ValueError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
