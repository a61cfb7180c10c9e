import os
import re
from typing import Any
from dataclasses import dataclass
from findtag.exceptions import ConfigurationError
from findtag.reference import ImageReference, parse_reference

import yaml


class Config:
    config: dict[str, Any]
    config_paths = ["config/find-tag.yaml", "config/find-tag.private.yaml"]
    default_values: dict[str, str | int | float] = {
        "registry": "https://index.docker.io/v2",
        "registry_auth": "https://auth.docker.io",
        "registry_service": "registry.docker.io",
        "image_name": "",
        "tags_filter": "",
        "tags_limit": 25,
        "timeout": 10,
        "request_delay": 0.5,
    }

    def __init__(self) -> None:
        self.config = {}
        for config_path in self.config_paths:
            self._load_config(config_path)

    def _load_config(self, file_path: str) -> None:
        if not os.path.exists(file_path):
            return

        with open(file_path, "r") as file:
            self.config.update(yaml.safe_load(file) or {})

    def __getitem__(self, key: str) -> Any:
        return next(
            (
                value
                for value in (
                    os.getenv(key.upper()) or None,
                    self.config.get(key.lower()),
                )
                if value is not None
            ),
            self.default_values.get(key),
        )


@dataclass(frozen=True)
class Options:
    image: ImageReference
    registry: str
    registry_auth: str
    registry_service: str
    tags_filter: str = ""
    tags_limit: int = 25
    verbosity: int = 0
    timeout: float = 10
    request_delay: float = 0.5


def parse_limit(value: Any) -> int:
    if not re.fullmatch(r"[0-9]+", str(value)) or int(value) < 1:
        raise ConfigurationError(
            f"Tag limit (-l) must be an integer > 0, got '{value}'"
        )

    return int(value)


def parse_seconds(key: str, value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got '{value}'")

    if seconds < 0:
        raise ConfigurationError(f"{key} must not be negative, got '{value}'")

    return seconds


def build_options(
    config: Config,
    image_name: str | None = None,
    registry: str | None = None,
    registry_auth: str | None = None,
    tags_limit: str | None = None,
    tags_filter: str | None = None,
    verbosity: int = 0,
) -> Options:
    """Merge CLI values over `config` and validate the result.

    Raises ConfigurationError before any network activity.
    """
    if not (name := image_name or config["image_name"]):
        raise ConfigurationError("Missing required Image Name (-n) option")

    return Options(
        image=parse_reference(str(name)),
        registry=str(registry or config["registry"]).rstrip("/"),
        registry_auth=str(registry_auth or config["registry_auth"]).rstrip("/"),
        registry_service=str(config["registry_service"]),
        tags_filter=str(
            tags_filter if tags_filter is not None else config["tags_filter"]
        ),
        tags_limit=parse_limit(
            tags_limit if tags_limit is not None else config["tags_limit"]
        ),
        verbosity=verbosity,
        timeout=parse_seconds("timeout", config["timeout"]),
        request_delay=parse_seconds("request_delay", config["request_delay"]),
    )
