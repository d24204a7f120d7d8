# tlpcore/config.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project root: .../tlp-codec
BASE_DIR = Path(__file__).resolve().parents[1]

FALLBACK_LYRIC = "あ"


class Settings(BaseSettings):
    """
    TLP codec settings.

    Reads from:
    - environment variables
    - .env in project root

    Import defaults (default lyric, corrupt-fragment policy) live here so that
    the HTTP layer and the local CLI agree on them.
    """

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ---- Environment / server ----
    app_env: str = Field(default="development", validation_alias="APP_ENV")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    cors_allow_origins: Optional[str] = Field(default=None, validation_alias="CORS_ALLOW_ORIGINS")

    # ---- Import ----
    # Substituted for blank lyrics (support alias TLP_DEFAULT_LYRIC)
    default_lyric: str = Field(
        default=FALLBACK_LYRIC,
        validation_alias=AliasChoices("DEFAULT_LYRIC", "TLP_DEFAULT_LYRIC"),
    )

    # False: one corrupt snapshot fails the whole decode
    # True: corrupt snapshots are skipped and reported as warnings
    skip_corrupt_fragments: bool = Field(default=False, validation_alias="SKIP_CORRUPT_FRAGMENTS")

    # ---- Upload safety ----
    max_upload_size_mb: int = Field(default=10, validation_alias="MAX_UPLOAD_SIZE_MB")

    def model_post_init(self, __context) -> None:
        if not self.default_lyric or not self.default_lyric.strip():
            self.default_lyric = FALLBACK_LYRIC

        if self.max_upload_size_mb <= 0:
            self.max_upload_size_mb = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


if __name__ == "__main__":
    # Quick self-check
    s = get_settings()
    print("Settings loaded")
    print(f"BASE_DIR: {BASE_DIR}")
    print(f"app_env: {s.app_env}")
    print(f"default_lyric: {s.default_lyric!r}")
    print(f"skip_corrupt_fragments: {s.skip_corrupt_fragments}")
    print(f"max_upload_size_mb: {s.max_upload_size_mb}MB")
