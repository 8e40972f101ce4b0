"""Configuration loading + normalization for media acquisition."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from media_acquisition.constraints.builder import AudioVocabulary, BackendProfile, ScreenVocabulary

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.txt")
BACKEND_CHOICES: tuple[str, ...] = ("synthetic", "host")
KIND_CHOICES: tuple[str, ...] = ("audio", "video", "screen", "desktop")


@dataclass(slots=True)
class AcquisitionSettings:
    """Normalized configuration derived from config file and CLI args."""

    backend: str = "synthetic"
    audio_vocabulary: AudioVocabulary = AudioVocabulary.NESTED
    screen_vocabulary: ScreenVocabulary = ScreenVocabulary.SOURCE
    reduced_default_profile: bool = False
    supports_fake_devices: bool = True
    screen_width: int = 1920
    screen_height: int = 1080
    plugin_source_key: Optional[str] = None
    log_level: str = "info"
    log_file: Optional[Path] = None
    console_output: bool = True
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    @classmethod
    def from_args(cls, args: Any) -> "AcquisitionSettings":
        """Create a settings instance from an argparse namespace."""

        defaults = cls()

        backend = str(getattr(args, "backend", defaults.backend) or defaults.backend).lower()
        if backend not in BACKEND_CHOICES:
            backend = defaults.backend

        log_file = getattr(args, "log_file", None)
        if log_file is not None and not isinstance(log_file, Path):
            log_file = Path(str(log_file))

        return cls(
            backend=backend,
            audio_vocabulary=AudioVocabulary.coerce(
                getattr(args, "audio_vocabulary", None), defaults.audio_vocabulary
            ),
            screen_vocabulary=ScreenVocabulary.coerce(
                getattr(args, "screen_vocabulary", None), defaults.screen_vocabulary
            ),
            reduced_default_profile=bool(getattr(args, "reduced_default_profile", defaults.reduced_default_profile)),
            supports_fake_devices=bool(getattr(args, "supports_fake_devices", defaults.supports_fake_devices)),
            screen_width=_positive_int(getattr(args, "screen_width", None), defaults.screen_width),
            screen_height=_positive_int(getattr(args, "screen_height", None), defaults.screen_height),
            plugin_source_key=getattr(args, "plugin_source_key", None) or None,
            log_level=str(getattr(args, "log_level", defaults.log_level) or defaults.log_level),
            log_file=log_file,
            console_output=bool(getattr(args, "console_output", defaults.console_output)),
            api_host=str(getattr(args, "api_host", defaults.api_host) or defaults.api_host),
            api_port=_positive_int(getattr(args, "api_port", None), defaults.api_port),
        )

    def backend_profile(self) -> BackendProfile:
        return BackendProfile(
            audio_vocabulary=self.audio_vocabulary,
            screen_vocabulary=self.screen_vocabulary,
            reduced_default_profile=self.reduced_default_profile,
            supports_fake_devices=self.supports_fake_devices,
            screen_size=(self.screen_width, self.screen_height),
            plugin_source_key=self.plugin_source_key,
        )


def _positive_int(value: Any, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return fallback
    return number if number > 0 else fallback


def read_config_file(path: Path) -> dict[str, object]:
    """Load key/value pairs from ``config.txt`` style files."""

    config: dict[str, object] = {}
    if not path.exists():
        return config

    text = path.read_text(encoding="utf-8")
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = [part.strip() for part in line.split("=", 1)]
        if not key:
            continue
        lowered = value.lower()
        if lowered in {"true", "yes", "on"}:
            config[key] = True
        elif lowered in {"false", "no", "off"}:
            config[key] = False
        else:
            try:
                config[key] = float(value) if "." in value else int(value)
            except ValueError:
                config[key] = value
    return config


def _config_value(config: Mapping[str, object], key: str, fallback: Any) -> Any:
    value = config.get(key, fallback)
    if key.endswith("_file") and isinstance(value, str):
        return Path(value)
    return value


def _add_bool_flag(parser: argparse.ArgumentParser, name: str, default: bool, help_text: str) -> None:
    dest = name.replace("-", "_")
    group = parser.add_mutually_exclusive_group()
    group.add_argument(f"--{name}", dest=dest, action="store_true", help=help_text)
    group.add_argument(f"--no-{name}", dest=dest, action="store_false")
    parser.set_defaults(**{dest: default})


def build_arg_parser(config: Mapping[str, object]) -> argparse.ArgumentParser:
    """Create the CLI parser with defaults sourced from the config file."""

    defaults = AcquisitionSettings()
    parser = argparse.ArgumentParser(
        prog="media_acquisition",
        description="Acquire audio, video and screen capture devices through one interface.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to a config.txt file")
    parser.add_argument(
        "--backend",
        choices=BACKEND_CHOICES,
        default=_config_value(config, "backend", defaults.backend),
        help="Capture backend to use",
    )
    parser.add_argument(
        "--audio-vocabulary",
        choices=[v.value for v in AudioVocabulary],
        default=_config_value(config, "audio_vocabulary", defaults.audio_vocabulary.value),
    )
    parser.add_argument(
        "--screen-vocabulary",
        choices=[v.value for v in ScreenVocabulary],
        default=_config_value(config, "screen_vocabulary", defaults.screen_vocabulary.value),
    )
    _add_bool_flag(
        parser,
        "reduced-default-profile",
        bool(_config_value(config, "reduced_default_profile", defaults.reduced_default_profile)),
        "Request a small camera size when no known resolution is given",
    )
    _add_bool_flag(
        parser,
        "supports-fake-devices",
        bool(_config_value(config, "supports_fake_devices", defaults.supports_fake_devices)),
        "Allow the fake-device flag to reach the backend",
    )
    parser.add_argument("--screen-width", type=int, default=_config_value(config, "screen_width", defaults.screen_width))
    parser.add_argument("--screen-height", type=int, default=_config_value(config, "screen_height", defaults.screen_height))
    parser.add_argument("--plugin-source-key", default=_config_value(config, "plugin_source_key", None))
    parser.add_argument(
        "--log-level",
        default=_config_value(config, "log_level", defaults.log_level),
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
    )
    parser.add_argument("--log-file", type=Path, default=_config_value(config, "log_file", None))
    _add_bool_flag(
        parser,
        "console-output",
        bool(_config_value(config, "console_output", defaults.console_output)),
        "Log to stdout",
    )
    parser.add_argument("--api-host", default=_config_value(config, "api_host", defaults.api_host))
    parser.add_argument("--api-port", type=int, default=_config_value(config, "api_port", defaults.api_port))

    # Acquisition request
    parser.add_argument(
        "--kinds",
        nargs="*",
        choices=KIND_CHOICES,
        default=["audio", "video"],
        help="Media kinds to acquire, in order",
    )
    parser.add_argument("--resolution", default=None, help="Resolution label such as 360 or 720")
    parser.add_argument("--bandwidth", type=int, default=None)
    parser.add_argument("--fps", type=float, default=None)
    parser.add_argument("--min-fps", type=float, default=None)
    parser.add_argument("--max-fps", type=float, default=None)
    parser.add_argument("--camera-device-id", default=None)
    parser.add_argument("--mic-device-id", default=None)
    parser.add_argument("--desktop-source-id", default=None)
    parser.add_argument("--fake-device", action="store_true")
    parser.add_argument("--serve", action="store_true", help="Run the HTTP API instead of a one-shot acquisition")
    return parser


def load_settings(argv: Optional[Sequence[str]] = None) -> tuple[AcquisitionSettings, argparse.Namespace]:
    """Read the config file (``--config`` or the packaged default) then parse ``argv``."""

    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    known, _ = pre.parse_known_args(argv)
    config = read_config_file(known.config)

    args = build_arg_parser(config).parse_args(argv)
    return AcquisitionSettings.from_args(args), args


__all__ = [
    "AcquisitionSettings",
    "BACKEND_CHOICES",
    "DEFAULT_CONFIG_PATH",
    "KIND_CHOICES",
    "build_arg_parser",
    "load_settings",
    "read_config_file",
]
