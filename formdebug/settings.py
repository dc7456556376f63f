"""Project settings (formdebug.toml or [tool.formdebug] in pyproject.toml)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from .errors import SettingsError

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "formdebug.toml"

FailOn = Literal["error", "warning"]

DEFAULT_EXCLUSIVE_PAIRS: tuple[tuple[str, str], ...] = (
    ("subscribe", "unsubscribe"),
    ("accept", "decline"),
    ("optIn", "optOut"),
)

# (value field, opt-out flag): a populated value with the flag set is contradictory
DEFAULT_OPT_OUT_PAIRS: tuple[tuple[str, str], ...] = (
    ("email", "emailOptOut"),
    ("phone", "smsOptOut"),
)

DEFAULT_CONSENT_FIELDS: tuple[str, ...] = ("parentConsent", "guardianConsent")

DEFAULT_PLACEHOLDER_DOMAINS: tuple[str, ...] = (
    "example.com",
    "example.org",
    "api.example",
    "localhost",
    "your-api",
    "yourdomain",
    "placeholder",
    "changeme",
    "todo",
)


@dataclass(frozen=True)
class RuleSettings:
    """Tuning knobs consumed by individual rules."""

    exclusive_pairs: tuple[tuple[str, str], ...] = DEFAULT_EXCLUSIVE_PAIRS
    opt_out_pairs: tuple[tuple[str, str], ...] = DEFAULT_OPT_OUT_PAIRS
    consent_fields: tuple[str, ...] = DEFAULT_CONSENT_FIELDS
    placeholder_domains: tuple[str, ...] = DEFAULT_PLACEHOLDER_DOMAINS


@dataclass(frozen=True)
class Settings:
    invariants: Path | None = None
    fail_on: FailOn = "error"
    disabled_rules: tuple[str, ...] = ()
    rules: RuleSettings = field(default_factory=RuleSettings)
    source: Path | None = None  # file the settings were read from


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _pairs(value: Any, key: str) -> tuple[tuple[str, str], ...] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise SettingsError(f"rules.{key} must be a list of [name, name] pairs")
    pairs: list[tuple[str, str]] = []
    for item in value:
        if not isinstance(item, list) or len(item) != 2 or not all(isinstance(x, str) for x in item):
            raise SettingsError(f"rules.{key} entries must be [name, name] pairs, got {item!r}")
        pairs.append((item[0], item[1]))
    return tuple(pairs)


def _strings(value: Any, key: str) -> tuple[str, ...] | None:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(x, str) for x in value):
        raise SettingsError(f"{key} must be a list of strings")
    return tuple(value)


def parse_settings(data: dict[str, Any], base_dir: Path, source: Path | None = None) -> Settings:
    """Build Settings from an already-selected TOML table."""
    fail_on = str(data.get("fail_on", "error")).strip() or "error"
    if fail_on not in ("error", "warning"):
        raise SettingsError(f"fail_on must be 'error' or 'warning', got {fail_on!r}")

    invariants = data.get("invariants")
    invariants_path = None
    if isinstance(invariants, str) and invariants.strip():
        invariants_path = (base_dir / invariants).resolve()

    rules_raw = _coerce_dict(data.get("rules"))
    defaults = RuleSettings()
    exclusive = _pairs(rules_raw.get("exclusive_pairs"), "exclusive_pairs")
    opt_out = _pairs(rules_raw.get("opt_out_pairs"), "opt_out_pairs")
    consent = _strings(rules_raw.get("consent_fields"), "rules.consent_fields")
    placeholders = _strings(rules_raw.get("placeholder_domains"), "rules.placeholder_domains")
    rules = RuleSettings(
        exclusive_pairs=defaults.exclusive_pairs if exclusive is None else exclusive,
        opt_out_pairs=defaults.opt_out_pairs if opt_out is None else opt_out,
        consent_fields=defaults.consent_fields if consent is None else consent,
        placeholder_domains=defaults.placeholder_domains if placeholders is None else placeholders,
    )

    disabled = _strings(data.get("disabled_rules"), "disabled_rules")

    return Settings(
        invariants=invariants_path,
        fail_on=fail_on,  # type: ignore[arg-type]
        disabled_rules=disabled or (),
        rules=rules,
        source=source,
    )


def load_settings(path: Path) -> Settings:
    """Load settings from formdebug.toml or a pyproject.toml [tool.formdebug] table."""
    import tomllib

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise SettingsError(f"Could not read {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name == "pyproject.toml":
        data = _coerce_dict(_coerce_dict(data.get("tool")).get("formdebug"))

    logger.debug("Loaded settings from %s", path)
    return parse_settings(data, path.parent, source=path)


def _has_tool_table(pyproject: Path) -> bool:
    import tomllib

    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "formdebug" in _coerce_dict(data.get("tool"))


def find_settings_file(start: Path) -> Path | None:
    """Find formdebug.toml (or a pyproject.toml with [tool.formdebug]) walking up from `start`."""
    cur = start.resolve()
    if cur.is_file():
        cur = cur.parent
    for p in (cur, *cur.parents):
        candidate = p / SETTINGS_FILENAME
        if candidate.is_file():
            return candidate
        pyproject = p / "pyproject.toml"
        if pyproject.is_file() and _has_tool_table(pyproject):
            return pyproject
    return None


def resolve_settings(explicit: Path | None, start: Path) -> Settings:
    """Explicit settings file wins; otherwise auto-detect; otherwise defaults."""
    if explicit is not None:
        return load_settings(explicit)
    detected = find_settings_file(start)
    if detected is None:
        return Settings()
    return load_settings(detected)
