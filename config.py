import tomllib
import shutil
import re
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
import os

CONFIG_DIR = Path.home() / ".scripturesketch"
CONFIG_PATH = CONFIG_DIR / "config.toml"
PROJECT_CONFIG_EXAMPLE = Path(__file__).parent / "config.toml"

TEXT_POSITIONS = ("below", "top")

def load_config() -> Dict[str, Any]:
    """Load config from ~/.scripturesketch/config.toml, copy example if missing, load .env overrides."""
    load_dotenv()
    if not CONFIG_PATH.exists():
        CONFIG_DIR.mkdir(exist_ok=True)
        shutil.copy(PROJECT_CONFIG_EXAMPLE, CONFIG_PATH)
    with open(CONFIG_PATH, "rb") as f:
        config = tomllib.load(f)

    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("SCRIPTURESKETCH_LOG_LEVEL", logging_cfg.get("level", "INFO")).upper(),
    }
    catalog_cfg = config.get("catalog", {})
    position = os.getenv(
        "SCRIPTURESKETCH_DEFAULT_TEXT_POSITION",
        catalog_cfg.get("default_text_position", "below"),
    ).lower()
    config["catalog"] = {
        "default_text_position": position if position in TEXT_POSITIONS else "below",
    }
    config["preferences"] = dict(config.get("preferences", {}))
    return config

def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g., get_config_value('catalog', 'default_text_position')."""
    config = load_config()
    value = config.get(section, {}).get(key, default)
    return value


def set_preference(key: str, value: bool) -> None:
    """Persist a boolean flag into the [preferences] section of config.toml."""
    if not re.fullmatch(r"[A-Za-z0-9_-]+", key):
        raise ValueError(f"Invalid preference key: {key!r}")
    load_config()
    line = f"{key} = {'true' if value else 'false'}"
    text = CONFIG_PATH.read_text(encoding="utf-8")
    if not re.search(r"^\[preferences\]\s*$", text, flags=re.MULTILINE):
        text = text.rstrip() + f"\n\n[preferences]\n{line}\n"
        CONFIG_PATH.write_text(text, encoding="utf-8")
        return

    key_re = re.compile(rf"^{re.escape(key)}\s*=.*$", flags=re.MULTILINE)

    def update_section(match: re.Match) -> str:
        section = match.group(1)
        rest = match.group(2)
        if key_re.search(section):
            section = key_re.sub(lambda _: line, section)
        else:
            lines = section.rstrip().splitlines()
            lines.insert(1, line)
            section = "\n".join(lines) + "\n"
            if rest:
                section += "\n"
        return section + rest

    text = re.sub(r"(?ms)(^\[preferences\]\s*$.*?)(^\[|\Z)", update_section, text, count=1)
    CONFIG_PATH.write_text(text, encoding="utf-8")


class PreferenceFlags:
    """Boolean flags stored in config.toml, e.g. one-time migration markers."""

    def get_bool(self, key: str, default: bool = False) -> bool:
        return bool(get_config_value("preferences", key, default))

    def set_bool(self, key: str, value: bool) -> None:
        set_preference(key, value)
