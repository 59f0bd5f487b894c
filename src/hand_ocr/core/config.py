"""Configuration for hand-ocr."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from hand_ocr.core.errors import ConfigurationError

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY")


@dataclass
class GeminiConfig:
    """Gemini-specific configuration."""

    api_key: str = ""
    model: str = "gemini-2.5-flash"
    timeout: float = 90.0  # seconds; the whole request, first-settled wins
    temperature: float = 0.1

    def __post_init__(self) -> None:
        if not self.api_key:
            for var in API_KEY_ENV_VARS:
                value = os.environ.get(var, "")
                if value:
                    self.api_key = value
                    break


@dataclass
class ImageConfig:
    """Crop and downscale settings."""

    max_dimension: int = 2048  # longest edge sent to the model


@dataclass
class ExportConfig:
    """Where exported tables land."""

    output_dir: Path = field(default_factory=lambda: Path("output"))

    def __post_init__(self) -> None:
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)


@dataclass
class AppConfig:
    """Main configuration for hand-ocr."""

    gemini: GeminiConfig = field(default_factory=GeminiConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    verbose: bool = False

    def require_api_key(self) -> str:
        """Return the Gemini key, failing hard when none is configured."""
        if not self.gemini.api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY environment variable not set. "
                "Export it with: export GEMINI_API_KEY='your-api-key'",
                config_key="GEMINI_API_KEY",
            )
        return self.gemini.api_key

    @classmethod
    def from_file(cls, path: Path | str) -> "AppConfig":
        """Load configuration from a YAML file."""
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        config = cls()

        try:
            if "gemini" in data:
                config.gemini = GeminiConfig(**data["gemini"])
            if "image" in data:
                config.image = ImageConfig(**data["image"])
            if "export" in data:
                config.export = ExportConfig(**data["export"])
        except TypeError as e:
            raise ConfigurationError(f"Invalid option in {path}: {e}") from e

        if "verbose" in data:
            config.verbose = bool(data["verbose"])

        return config
