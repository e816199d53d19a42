"""config.py — Pipeline settings, loaded from .env and the process environment."""

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv, set_key

from errors import ConfigError

ENV_FILE = Path(".env")

DEFAULT_URL_TEMPLATE = "https://univterbuka.kotobee.com/#/book/{book_id}/reader/chapter/{chapter}"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class PipelineConfig:
    url_template: str = DEFAULT_URL_TEMPLATE
    content_selector: str = "#epubContent"
    container_id: str = "epubContainer"
    container_class: str = "stylesEnabled"

    # Timeouts in seconds. The first chapter of a run gets the cold-start allowance.
    first_navigation_timeout: float = 60.0
    navigation_timeout: float = 30.0
    marker_timeout: float = 30.0
    settle_delay: float = 2.0
    render_settle_delay: float = 0.5

    blank_page_threshold: int = 100  # content-stream bytes

    headless: bool = True
    profile_dir: Path | None = None
    browser_channel: str | None = None

    @property
    def container_selector(self) -> str:
        return f"#{self.container_id}"

    def timeout_for(self, is_first_in_run: bool) -> float:
        return self.first_navigation_timeout if is_first_in_run else self.navigation_timeout


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean (got {raw!r})")


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number (got {raw!r})") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative (got {raw!r})")
    return value


def load_config(**overrides) -> PipelineConfig:
    """
    Build a PipelineConfig from defaults, then PRINTBOOK_* environment
    variables (.env included), then explicit keyword overrides.
    Overrides whose value is None are ignored.
    """
    load_dotenv()
    env = {}

    headless = os.getenv("PRINTBOOK_HEADLESS", "").strip()
    if headless:
        env["headless"] = _parse_bool("PRINTBOOK_HEADLESS", headless)

    profile = os.getenv("PRINTBOOK_PROFILE_DIR", "").strip()
    if profile:
        env["profile_dir"] = Path(profile).expanduser()

    channel = os.getenv("PRINTBOOK_BROWSER_CHANNEL", "").strip()
    if channel:
        env["browser_channel"] = channel

    template = os.getenv("PRINTBOOK_URL_TEMPLATE", "").strip()
    if template:
        env["url_template"] = template

    settle = os.getenv("PRINTBOOK_SETTLE_DELAY", "").strip()
    if settle:
        env["settle_delay"] = _parse_float("PRINTBOOK_SETTLE_DELAY", settle)

    env.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return replace(PipelineConfig(), **env)
    except TypeError as e:
        raise ConfigError(str(e)) from None


def save_setting(key: str, value: str, env_file: Path = ENV_FILE) -> None:
    """Persist a setting to .env for future runs."""
    env_file.touch(exist_ok=True)
    set_key(str(env_file), key, value)
