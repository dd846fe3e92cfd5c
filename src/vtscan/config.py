"""Configuration and credential management for vtscan.

Two layers live here:

* ``ScannerConfig`` holds runtime settings (endpoint, poll timing) and picks up
  missing values from environment variables or a ``.env`` file.
* ``ToolConfig`` persists the API key and the privacy waiver in a local INI
  file under the ``[VirusTotal]`` section.
"""

from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from dotenv import load_dotenv

from vtscan.exceptions import ConfigurationError

logger = logging.getLogger("vtscan.config")

VIRUSTOTAL_HOST = "www.virustotal.com"

# What www.virustotal.com resolved to when the tool was written. Only used
# when DNS resolution fails.
VIRUSTOTAL_FALLBACK_IP = "74.125.34.46"

DEFAULT_CONFIG_FILE = Path.home() / ".vtscan" / "config.ini"
CONFIG_GROUP = "VirusTotal"


@dataclass
class ScannerConfig:
    """Runtime settings for talking to VirusTotal.

    Values load automatically from environment variables. You can also pass
    them directly or point to a .env file.

    Environment variables:
        VTSCAN_API_KEY     — API key used when none is stored in the config file
        VTSCAN_CONFIG_FILE — path to the INI file holding the key and waiver
        VTSCAN_HOST        — VirusTotal hostname
    """

    api_key: str = ""
    config_file: str = ""

    # Endpoint
    host: str = VIRUSTOTAL_HOST
    fallback_ip: str = VIRUSTOTAL_FALLBACK_IP
    port: int = 443

    # Timing (seconds)
    poll_delay: int = 60
    max_wait: int = 3600
    request_timeout: int = 120

    # The public API allows 4 requests per minute
    max_samples: int = 4

    env_file: str | None = None
    _loaded: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        if not self._loaded:
            self._load_from_env()
            self._loaded = True

    def _load_from_env(self) -> None:
        """Load missing values from environment variables / .env file."""
        if self.env_file:
            env_path = Path(self.env_file)
            if env_path.exists():
                load_dotenv(env_path)
            else:
                logger.warning("Specified .env file not found: %s", self.env_file)
        else:
            load_dotenv()

        if not self.api_key:
            self.api_key = os.getenv("VTSCAN_API_KEY", "")
        if not self.config_file:
            self.config_file = os.getenv("VTSCAN_CONFIG_FILE", "") or str(DEFAULT_CONFIG_FILE)

        host_override = os.getenv("VTSCAN_HOST", "")
        if host_override:
            self.host = host_override

    def validate(self) -> None:
        """Validate the configuration. Raises ConfigurationError if unusable."""
        if not self.host:
            raise ConfigurationError("No VirusTotal host configured.")
        if self.poll_delay < 0:
            raise ConfigurationError(
                f"Poll delay must be zero or more seconds, got {self.poll_delay}"
            )
        if self.max_wait <= 0:
            raise ConfigurationError(
                f"Maximum wait must be a positive number of seconds, got {self.max_wait}"
            )


class SettingsStore(Protocol):
    """Minimal key-value settings backend."""

    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str) -> None: ...


class IniSettingsStore:
    """Settings kept in one section of an INI file.

    The file is read on every access and rewritten on every write, so other
    sections in a shared file are preserved.
    """

    def __init__(self, path: str | Path, section: str = CONFIG_GROUP) -> None:
        self.path = Path(path).expanduser()
        self.section = section

    def _read(self) -> configparser.ConfigParser:
        parser = configparser.ConfigParser(interpolation=None)
        if self.path.is_file():
            try:
                parser.read(self.path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Cannot parse {self.path}: {e}", details={"path": str(self.path)}
                ) from e
        return parser

    def get(self, name: str) -> str | None:
        parser = self._read()
        if not parser.has_section(self.section):
            return None
        return parser.get(self.section, name, fallback=None)

    def set(self, name: str, value: str) -> None:
        parser = self._read()
        if not parser.has_section(self.section):
            parser.add_section(self.section)
        parser.set(self.section, name, value)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as fh:
            parser.write(fh)
        logger.debug("Saved %s to %s [%s]", name, self.path, self.section)


class ToolConfig:
    """Persisted API key and privacy waiver."""

    def __init__(self, store: SettingsStore) -> None:
        self._store = store

    @classmethod
    def from_file(cls, path: str | Path) -> ToolConfig:
        return cls(IniSettingsStore(path))

    def save_api_key(self, key: str) -> None:
        self._store.set("api_key", key)

    def load_api_key(self) -> str:
        """Return the stored API key, or an empty string if none was saved."""
        return self._store.get("api_key") or ""

    def save_privacy_waiver(self) -> None:
        """Record that the user acknowledged the VirusTotal terms of service."""
        self._store.set("waiver", "true")

    def has_privacy_waiver(self) -> bool:
        value = self._store.get("waiver")
        if not value:
            return False
        return configparser.ConfigParser.BOOLEAN_STATES.get(value.strip().lower(), False)
