"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediatool.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")

_REPO_ROOT = Path(__file__).resolve().parents[3]


def _resolve_repo_path(value: str) -> str:
    raw = str(value or "").strip()
    if not raw:
        return raw
    p = Path(raw)
    if p.is_absolute():
        return str(p)
    return str((_REPO_ROOT / p).resolve())


class FFmpegConfig(BaseSettings):
    """Transcoder configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FFMPEG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bin: str = "ffmpeg"
    audio_codec: str = "aac"
    audio_bitrate: str = "192k"
    timeout_s: float | None = Field(default=None, gt=0)


class WhisperConfig(BaseSettings):
    """Speech-recognition binaries (whisper.cpp first, then openai-whisper)."""

    model_config = SettingsConfigDict(
        env_prefix="WHISPER_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cpp_bin: str = Field(
        default="",
        validation_alias=AliasChoices("cpp_bin", "WHISPER_CPP_BIN"),
    )
    cpp_model: str = Field(
        default="",
        validation_alias=AliasChoices("cpp_model", "WHISPER_CPP_MODEL"),
    )
    # Searched for `whisper`/`whisper-cli` and `models/ggml-*.bin`.
    vendor_dirs: list[str] = Field(default_factory=lambda: ["./vendor/whisper"])
    cli_bin: str = "whisper"
    python_bin: str = "python"
    timeout_s: float | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _resolve_paths(self) -> "WhisperConfig":
        self.vendor_dirs = [_resolve_repo_path(d) for d in self.vendor_dirs if str(d).strip()]
        return self


class OutputConfig(BaseSettings):
    """Naming and mutation policy for generated files."""

    model_config = SettingsConfigDict(
        env_prefix="OUTPUT_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    audio_tag: str = "__audio"
    muted_tag: str = "__muted"
    subtitle_tag: str = "__subtitles"
    audio_ext: str = ".m4a"
    mute_by_default: bool = True
    # Overwrite the source video with its muted copy (a backup is kept for undo).
    mute_in_place: bool = Field(
        default=False,
        validation_alias=AliasChoices("mute_in_place", "MUTE_IN_PLACE"),
    )

    @model_validator(mode="after")
    def _validate_tags(self) -> "OutputConfig":
        tags = {self.audio_tag, self.muted_tag, self.subtitle_tag}
        if len(tags) != 3 or any(not t.strip() for t in tags):
            raise ConfigurationError("OUTPUT_*_TAG values must be distinct and non-empty")
        if not self.audio_ext.startswith("."):
            self.audio_ext = f".{self.audio_ext}"
        return self


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    # Optional overrides for the job runners and the session/undo layer.
    jobs_level: str | None = None
    session_level: str | None = None
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    data_dir: str = "./data"
    log_dir: str = "./logs"

    ffmpeg: FFmpegConfig = FFmpegConfig()
    whisper: WhisperConfig = WhisperConfig()
    output: OutputConfig = OutputConfig()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    def model_post_init(self, __context: Any) -> None:
        def _abs_dir(p: str) -> str:
            out = Path(_resolve_repo_path(p))
            out.mkdir(parents=True, exist_ok=True)
            return str(out)

        self.data_dir = _abs_dir(self.data_dir)
        self.log_dir = _abs_dir(self.log_dir)

    @property
    def backup_dir(self) -> Path:
        return Path(self.data_dir) / "video-backups"

    @property
    def subtitles_tmp_dir(self) -> Path:
        return Path(self.data_dir) / "subtitles-tmp"

    @property
    def extracted_audio_dir(self) -> Path:
        return Path(self.data_dir) / "extracted-audio"
