"""Configuration helpers for the photoshoot studio."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Callable, Optional, TypeVar

DEFAULT_ANALYSIS_MODEL = "gemini-3-flash-preview"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"
DEFAULT_ASPECT_RATIO = "3:4"

T = TypeVar("T")


@dataclass
class StudioConfig:
    """Configuration values for the studio.

    The API key is resolved once here and handed to the provider explicitly;
    nothing in the generation pipeline reads credentials from the environment.
    """

    api_key: Optional[str] = None
    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    aspect_ratio: str = DEFAULT_ASPECT_RATIO
    analysis_max_attempts: int = 3
    frame_max_attempts: int = 3
    refine_max_attempts: int = 2
    retry_base_delay: float = 1.0
    retry_max_delay: float = 8.0
    daily_generation_limit: int = 20
    history_limit: int = 20
    data_dir: str = "data"
    environment: str | None = None

    def __post_init__(self) -> None:
        for name in ("analysis_max_attempts", "frame_max_attempts", "refine_max_attempts"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")
        if self.retry_base_delay < 0 or self.retry_max_delay < 0:
            raise ValueError("Retry delays cannot be negative")

    @property
    def usage_dir(self) -> Path:
        return Path(self.data_dir) / "usage"

    @property
    def history_dir(self) -> Path:
        return Path(self.data_dir) / "history"

    @classmethod
    def from_env(cls) -> "StudioConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that secrets can be
        injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("STUDIO_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        def get_typed(key: str, cast: Callable[[str], T], default: T) -> T:
            raw = get_value(key)
            if raw in (None, ""):
                return default
            try:
                return cast(raw)
            except ValueError as exc:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from exc

        api_key = get_value("gemini_api_key") or get_value("google_api_key") or get_value("api_key")

        return cls(
            api_key=api_key or None,
            analysis_model=str(get_value("analysis_model") or DEFAULT_ANALYSIS_MODEL),
            image_model=str(get_value("image_model") or DEFAULT_IMAGE_MODEL),
            aspect_ratio=str(get_value("aspect_ratio") or DEFAULT_ASPECT_RATIO),
            analysis_max_attempts=get_typed("analysis_max_attempts", int, 3),
            frame_max_attempts=get_typed("frame_max_attempts", int, 3),
            refine_max_attempts=get_typed("refine_max_attempts", int, 2),
            retry_base_delay=get_typed("retry_base_delay", float, 1.0),
            retry_max_delay=get_typed("retry_max_delay", float, 8.0),
            daily_generation_limit=get_typed("daily_generation_limit", int, 20),
            history_limit=get_typed("history_limit", int, 20),
            data_dir=str(get_value("data_dir") or "data"),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
