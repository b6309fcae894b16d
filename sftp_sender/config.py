"""Configuration loading for the SFTP sender."""

from __future__ import annotations

import os
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError, CredentialNotFound

DEFAULT_CONFIG_PATH = "~/.config/sftpsender/config.yaml"
CONFIG_URL = "https://raw.githubusercontent.com/rix4uni/sftpsender/refs/heads/main/config.yaml"
DEFAULT_REMOTE_LOCATION = "/root"
ENV_PREFIX = "SFTPSENDER_"


class Env:
    """Reads top-level scalar settings from YAML, letting the environment win."""

    def __init__(self, data: Dict[str, Any], prefix: str = ENV_PREFIX):
        self.prefix = prefix
        self.data = {
            str(k).upper(): v for k, v in (data or {}).items()
            if not isinstance(v, (dict, list))
        }

    def get(self, key: str, default: Any = None) -> Any:
        return os.getenv(self.prefix + key, self.data.get(key, default))

    def get_int(self, key: str, default: int) -> int:
        val = self.get(key)
        if val is None or val == "":
            return default
        if isinstance(val, bool):
            return int(val)
        if isinstance(val, (int, float)):
            return int(val)
        try:
            return int(str(val))
        except ValueError:
            return default

    def get_float(self, key: str, default: float) -> float:
        val = self.get(key)
        if val is None or val == "":
            return default
        if isinstance(val, (int, float)):
            return float(val)
        try:
            return float(str(val))
        except ValueError:
            return default

    def get_bool(self, key: str, default: bool) -> bool:
        val = self.get(key)
        if val is None or val == "":
            return default
        if isinstance(val, bool):
            return val
        if isinstance(val, (int, float)):
            return val != 0
        return str(val).lower() not in {"0", "false", "no", "off"}


@dataclass
class Credential:
    ip: str
    username: str
    password: Optional[str] = None
    name: Optional[str] = None
    port: int = 22
    key_path: Optional[str] = None
    secret: Optional[str] = None

    @property
    def label(self) -> str:
        return f"{self.name} ({self.ip})" if self.name else self.ip


@dataclass
class Config:
    credentials: List[Credential] = field(default_factory=list)
    default_remote_location: str = DEFAULT_REMOTE_LOCATION
    timeout: float = 30.0
    strict_host_key_checking: bool = False
    chunk_size: int = 256 * 1024
    max_workers: int = 1
    log_file: Optional[str] = None
    config_path: str = ""

    def find_credential(self, host: str) -> Credential:
        """Resolve a VPS name, falling back to a raw IP match."""
        for cred in self.credentials:
            if cred.name and cred.name == host:
                return cred
        for cred in self.credentials:
            if cred.ip == host:
                return cred
        raise CredentialNotFound(host)


def expand_home(path: str) -> Path:
    return Path(os.path.expanduser(str(path)))


def _ci_get(mapping: Dict[str, Any], key: str, default: Any = None) -> Any:
    if not isinstance(mapping, dict):
        return default
    target = key.lower()
    for k, v in mapping.items():
        if isinstance(k, str) and k.lower() == target:
            return v
    return default


def parse_credentials(raw: Any, source: str = "config") -> List[Credential]:
    if raw is None:
        return []
    if not isinstance(raw, (list, tuple)):
        raise ConfigError(f"{source}: credentials section must be a list")

    creds: List[Credential] = []
    for pos, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ConfigError(f"{source}: credentials[{pos}] must be a mapping")
        ip = _ci_get(item, "ip")
        if not ip:
            raise ConfigError(f"{source}: credentials[{pos}] is missing 'ip'")
        try:
            port = int(_ci_get(item, "port", 22) or 22)
        except (TypeError, ValueError):
            raise ConfigError(f"{source}: credentials[{pos}] has an invalid port")
        name = _ci_get(item, "name")
        password = _ci_get(item, "password")
        key_path = _ci_get(item, "key_path")
        secret = _ci_get(item, "secret")
        creds.append(
            Credential(
                ip=str(ip),
                username=str(_ci_get(item, "username", "") or ""),
                password=str(password) if password is not None else None,
                name=str(name) if name else None,
                port=port,
                key_path=str(key_path) if key_path else None,
                secret=str(secret) if secret else None,
            )
        )
    return creds


def load_config(config_path: str, log_file: Optional[str] = None) -> Config:
    path = expand_home(config_path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse config file {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} root must be a mapping")

    env = Env(raw)
    cfg = Config(
        credentials=parse_credentials(_ci_get(raw, "credentials"), str(path)),
        default_remote_location=str(env.get("DEFAULT_REMOTE_LOCATION", "") or DEFAULT_REMOTE_LOCATION),
        timeout=env.get_float("TIMEOUT", 30.0),
        strict_host_key_checking=env.get_bool("STRICT_HOST_KEY_CHECKING", False),
        chunk_size=max(4096, env.get_int("CHUNK_SIZE", 256 * 1024)),
        max_workers=max(1, env.get_int("MAX_WORKERS", 1)),
        log_file=log_file or env.get("LOG_FILE", None),
        config_path=str(path),
    )
    return cfg


def ensure_config_exists(config_path: str, url: str = CONFIG_URL, timeout: float = 30.0) -> bool:
    """Download a starter config when none exists yet.

    Returns True when a file was downloaded.
    """
    path = expand_home(config_path)
    if path.exists():
        return False

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"failed to create config directory: {exc}") from exc

    print(f"Downloading config file to {path}...")
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            status = getattr(resp, "status", 200)
            if status != 200:
                raise ConfigError(f"failed to download config file: HTTP {status}")
            body = resp.read()
    except urllib.error.HTTPError as exc:
        raise ConfigError(f"failed to download config file: HTTP {exc.code}") from exc
    except urllib.error.URLError as exc:
        raise ConfigError(f"failed to download config file: {exc.reason}") from exc

    try:
        path.write_bytes(body)
    except OSError as exc:
        raise ConfigError(f"failed to write config file: {exc}") from exc
    print("Config file downloaded successfully!")
    return True


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "CONFIG_URL",
    "Env",
    "Credential",
    "Config",
    "expand_home",
    "parse_credentials",
    "load_config",
    "ensure_config_exists",
]
