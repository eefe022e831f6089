import tomllib
import shutil
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".recite"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"
DEFAULT_DB_NAME = "recite.db"

def load_config() -> Dict[str, Any]:
    """Load config from ~/.recite/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()  # Load .env for overrides (e.g., RECITE_DB_PATH env var)
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    storage_cfg = config.get("storage", {})
    db_path = os.getenv("RECITE_DB_PATH", storage_cfg.get("db_path") or "")
    config["storage"] = {
        "db_path": db_path or str(CONFIG_DIR / DEFAULT_DB_NAME),
    }
    server_cfg = config.get("server", {})
    config["server"] = {
        "host": os.getenv("RECITE_HOST", server_cfg.get("host", "127.0.0.1")),
        "port": int(os.getenv("RECITE_PORT", server_cfg.get("port", 8000))),
    }
    samples_cfg = config.get("samples", {})
    config["samples"] = {
        "preload": os.getenv(
            "RECITE_PRELOAD_SAMPLE",
            str(samples_cfg.get("preload", True))
        ).lower() == "true",
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("RECITE_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('storage', 'db_path')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value
