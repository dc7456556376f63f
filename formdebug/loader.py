"""Loading of form configs, runtime states and invariants from disk."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

from .errors import DocumentLoadError
from .invariants import DEFAULT_INVARIANTS, Invariants, parse_invariants
from .models import FormConfig, RuntimeState
from .simulate import simulate

logger = logging.getLogger(__name__)

# Path argument meaning "read the document from stdin" (parsed as JSON)
STDIN = "-"


def _parse_text(path: Path, text: str) -> Any:
    suffix = path.suffix.lower()
    if suffix in (".yml", ".yaml"):
        import yaml

        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise DocumentLoadError(path, f"invalid YAML ({exc})") from exc

    if suffix == ".toml":
        import tomllib

        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise DocumentLoadError(path, f"invalid TOML ({exc})") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocumentLoadError(path, f"invalid JSON at line {exc.lineno} column {exc.colno} ({exc.msg})") from exc


def load_document(path: Path) -> dict[str, Any]:
    """Read a JSON, YAML or TOML document whose top level is a mapping."""
    try:
        text = sys.stdin.read() if str(path) == STDIN else path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise DocumentLoadError(path, "file not found") from exc
    except OSError as exc:
        raise DocumentLoadError(path, str(exc)) from exc

    data = _parse_text(path, text)
    if not isinstance(data, dict):
        raise DocumentLoadError(path, f"top level must be an object, got {type(data).__name__}")

    logger.debug("Loaded %s", path)
    return data


def load_form_config(path: Path) -> FormConfig:
    return FormConfig.from_dict(load_document(path))


def _state_from_dict(raw: dict[str, Any], config: FormConfig, name: str | None) -> RuntimeState:
    values = raw.get("values")
    values = dict(values) if isinstance(values, dict) else {}
    visibility = raw.get("visibility")

    if isinstance(visibility, dict):
        return RuntimeState(
            values=values,
            visibility={str(k): v for k, v in visibility.items() if isinstance(v, bool)},
            name=name,
        )

    # No snapshot supplied: compute one from the config's showIf rules
    return simulate(config, values, name=name)


def states_from_document(data: dict[str, Any], config: FormConfig) -> list[RuntimeState]:
    """Accept a single ``{values, visibility}`` state or an examples file ``{states: [...]}``."""
    examples = data.get("states")
    if isinstance(examples, list):
        states = []
        for index, item in enumerate(examples):
            if not isinstance(item, dict):
                logger.warning("Skipping non-object state at states[%d]", index)
                continue
            name = item.get("name")
            states.append(_state_from_dict(item, config, name if isinstance(name, str) else f"states[{index}]"))
        return states

    return [_state_from_dict(data, config, data.get("name") if isinstance(data.get("name"), str) else None)]


def load_states(path: Path | None, config: FormConfig) -> list[RuntimeState]:
    """Load runtime states; without a file, a single simulated empty state is used."""
    if path is None:
        return [simulate(config, {})]
    states = states_from_document(load_document(path), config)
    if not states:
        logger.warning("%s contains no states; analyzing an empty state", path)
        return [simulate(config, {})]
    return states


def load_invariants(path: Path | None) -> Invariants:
    if path is None:
        return DEFAULT_INVARIANTS
    return parse_invariants(load_document(path))
