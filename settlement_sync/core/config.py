"""
Configuration loading for the settlement sync worker.

Values are layered: built-in defaults, then an optional TOML file, then
environment variables. The store URL and service credential are required;
the credential may also come from the OS keyring.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

import keyring
import toml

from .data_paths import get_user_data_path
from .errors import ConfigurationError

KEYRING_SERVICE_NAME = "SettlementSync"
KEYRING_CREDENTIAL_KEY = "service_role_key"
CONFIG_FILENAME = "settlement_sync.toml"

DEFAULT_SETTLEMENT_ID = "144115188105096768"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
MEMBER_SCOPES = ("settlement", "global")


@dataclass
class SyncConfig:
    """Resolved worker configuration."""

    supabase_url: str
    service_role_key: str
    settlement_ids: List[str] = field(default_factory=lambda: [DEFAULT_SETTLEMENT_ID])
    bitjita_base_url: str = "https://bitjita.com"
    scrape_interval_seconds: float = 60.0
    request_timeout_seconds: float = 30.0
    snapshot_dir: str = "scraped-data"
    snapshots_enabled: bool = True
    member_scope: str = "settlement"
    manual_scrape_cooldown_seconds: float = 300.0
    log_level: str = "INFO"
    user_agent: str = DEFAULT_USER_AGENT


# env var -> (config field, converter)
_ENV_OVERRIDES = {
    "SETTLEMENT_IDS": ("settlement_ids", "list"),
    "BITJITA_BASE_URL": ("bitjita_base_url", "str"),
    "SCRAPE_INTERVAL_SECONDS": ("scrape_interval_seconds", "float"),
    "REQUEST_TIMEOUT_SECONDS": ("request_timeout_seconds", "float"),
    "SNAPSHOT_DIR": ("snapshot_dir", "str"),
    "SNAPSHOTS_ENABLED": ("snapshots_enabled", "bool"),
    "MEMBER_SCOPE": ("member_scope", "str"),
    "MANUAL_SCRAPE_COOLDOWN_SECONDS": ("manual_scrape_cooldown_seconds", "float"),
    "LOG_LEVEL": ("log_level", "str"),
    "BITJITA_USER_AGENT": ("user_agent", "str"),
}


def _convert(value, kind: str, name: str):
    try:
        if kind == "list":
            if isinstance(value, (list, tuple)):
                return [str(v).strip() for v in value if str(v).strip()]
            return [part.strip() for part in str(value).split(",") if part.strip()]
        if kind == "float":
            return float(value)
        if kind == "bool":
            if isinstance(value, bool):
                return value
            return str(value).strip().lower() in ("1", "true", "yes", "on")
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value for {name}: {value!r} ({e})")


def _read_config_file(path: str) -> Dict:
    """Read the optional TOML config file. A missing file yields no overrides."""
    if not os.path.exists(path):
        logging.debug(f"No config file at {path}, using defaults and environment")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = toml.load(f)
        logging.info(f"Loaded configuration file: {path}")
        return data
    except toml.TomlDecodeError as e:
        raise ConfigurationError(f"Config file {path} is not valid TOML: {e}")
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}")


def _get_credential_from_keyring() -> Optional[str]:
    try:
        return keyring.get_password(KEYRING_SERVICE_NAME, KEYRING_CREDENTIAL_KEY)
    except keyring.errors.NoKeyringError:
        logging.warning("No keyring backend found - service credential must come from the environment.")
        return None
    except Exception as e:
        logging.error(f"Error retrieving '{KEYRING_CREDENTIAL_KEY}' from keyring: {e}")
        return None


def load_config(env: Optional[Mapping[str, str]] = None, config_path: Optional[str] = None, use_keyring: bool = True) -> SyncConfig:
    """
    Build the worker configuration.

    Args:
        env: Environment mapping (defaults to os.environ)
        config_path: Explicit TOML path; defaults to SETTLEMENT_SYNC_CONFIG or
            settlement_sync.toml in the user data directory
        use_keyring: Whether to consult the OS keyring for the credential

    Returns:
        SyncConfig: The resolved configuration

    Raises:
        ConfigurationError: If the store URL or credential is missing, or a
            value is invalid.
    """
    env = os.environ if env is None else env
    path = config_path or env.get("SETTLEMENT_SYNC_CONFIG") or get_user_data_path(CONFIG_FILENAME)
    file_values = _read_config_file(path)

    values: Dict = {}
    for name, (attr, kind) in _ENV_OVERRIDES.items():
        if attr in file_values:
            values[attr] = _convert(file_values[attr], kind, attr)
        if env.get(name):
            values[attr] = _convert(env[name], kind, name)

    supabase_url = env.get("SUPABASE_URL") or env.get("VITE_SUPABASE_URL") or file_values.get("supabase_url")
    service_role_key = env.get("SUPABASE_SERVICE_ROLE_KEY")
    if not service_role_key and use_keyring:
        service_role_key = _get_credential_from_keyring()

    missing = []
    if not supabase_url:
        missing.append("SUPABASE_URL")
    if not service_role_key:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")
    if missing:
        raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

    config = SyncConfig(supabase_url=supabase_url.rstrip("/"), service_role_key=service_role_key, **values)

    if config.member_scope not in MEMBER_SCOPES:
        raise ConfigurationError(f"member_scope must be one of {MEMBER_SCOPES}, got {config.member_scope!r}")
    if config.scrape_interval_seconds <= 0:
        raise ConfigurationError("scrape_interval_seconds must be positive")
    if not config.settlement_ids:
        raise ConfigurationError("At least one settlement id is required")

    return config
