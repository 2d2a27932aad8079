import json
import os
import re as regex
from dataclasses import dataclass
from enum import Enum

from fetcher_errors import ConfigError

CONF_FILENAME = ".zoom-lomax"

DEFAULT_DAYS = 1
DEFAULT_SENDER = "zoom-recording-fetcher@localhost"
DEFAULT_SMTP_HOST = "localhost"

# Loose syntax check: a local part, an "@", and dot-separated host labels.
EMAIL_PATTERN = regex.compile(r"^[^@\s<>(),;:]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)*$")


class RangeMode(Enum):
    """Where the lookback window is applied."""

    FILTER = "filter"  # padded API query, meetings filtered locally
    QUERY = "query"  # the API query itself is bounded, no local filter


@dataclass(frozen=True)
class Config:
    api_key: str
    api_secret: str
    user: str
    output_dir: str
    days: int = DEFAULT_DAYS
    notify: str = None
    sender: str = DEFAULT_SENDER
    smtp_host: str = DEFAULT_SMTP_HOST
    range_mode: RangeMode = RangeMode.FILTER


def get_default_config_file():
    home = os.path.expanduser("~")
    if not home or home == "~":
        raise ConfigError("couldn't locate home directory")
    return os.path.join(home, CONF_FILENAME)


def value(conf, key, default=""):
    try:
        return conf[key]
    except KeyError:
        if default == LookupError:
            raise ConfigError(f"no value provided for '{key}'") from None
        return default


def _string(conf, key, default=LookupError):
    raw = value(conf, key, default)
    required = default == LookupError
    if raw is None or raw == "":
        if required:
            raise ConfigError(f"no value provided for '{key}'")
        return raw
    if not isinstance(raw, str):
        raise ConfigError(f"'{key}' must be a string, got {type(raw).__name__}")
    return raw


def is_valid_address(address):
    return bool(EMAIL_PATTERN.match(address))


def parse_config(conf):
    """Validate a decoded configuration mapping and build a Config."""
    if not isinstance(conf, dict):
        raise ConfigError("configuration must be a JSON object")

    days = value(conf, "days", DEFAULT_DAYS)
    # bool is an int subclass; "days": true is a typo, not a number.
    if isinstance(days, bool) or not isinstance(days, int):
        raise ConfigError(f"'days' must be an integer, got {days!r}")
    if days < 0:
        raise ConfigError(f"'days' must not be negative, got {days}")

    notify = _string(conf, "notify", None) or None
    if notify is not None and not is_valid_address(notify):
        raise ConfigError(f"invalid notification address '{notify}'")

    sender = _string(conf, "sender", DEFAULT_SENDER) or DEFAULT_SENDER
    if not is_valid_address(sender):
        raise ConfigError(f"invalid sender address '{sender}'")

    range_mode = _string(conf, "range_mode", None) or RangeMode.FILTER.value
    try:
        range_mode = RangeMode(range_mode)
    except ValueError:
        raise ConfigError(
            f"'range_mode' must be one of "
            f"{', '.join(mode.value for mode in RangeMode)}, got '{range_mode}'"
        ) from None

    return Config(
        api_key=_string(conf, "api_key"),
        api_secret=_string(conf, "api_secret"),
        user=_string(conf, "user"),
        output_dir=os.path.expanduser(_string(conf, "output_dir")),
        days=days,
        notify=notify,
        sender=sender,
        smtp_host=_string(conf, "smtp_host", DEFAULT_SMTP_HOST) or DEFAULT_SMTP_HOST,
        range_mode=range_mode,
    )


def load_config(conf_path=None):
    """Load and validate the JSON configuration file."""
    if conf_path is None:
        conf_path = get_default_config_file()

    try:
        with open(conf_path, encoding="utf-8-sig") as json_file:
            conf = json.loads(json_file.read())
    except json.JSONDecodeError as e:
        raise ConfigError(f"error parsing JSON in {conf_path}: {e}") from e
    except FileNotFoundError:
        raise ConfigError(f"configuration file {conf_path} not found") from None
    except OSError as e:
        raise ConfigError(f"couldn't read {conf_path}: {e}") from e

    return parse_config(conf)
