"""
Access rule loader.

Rules come from the ``rules.access_rules`` setting and from
``access_rules.json`` files shipped by installed Django apps. Malformed
entries are logged and skipped.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Optional

from django.apps import apps

from ..config_proxy import get_setting
from ..exceptions import RuleConfigurationError
from .types import AccessRule

logger = logging.getLogger(__name__)

RULES_FILENAME = "access_rules.json"


def load_configured_rules() -> list[AccessRule]:
    """Build every rule declared in settings and, if enabled, in app files."""
    rules = build_rules(get_setting("rules.access_rules", []) or [], source="settings")
    if get_setting("rules.load_app_rule_files", True):
        rules.extend(load_app_access_rules())
    return rules


def load_app_access_rules(
    app_configs: Optional[Iterable[object]] = None,
) -> list[AccessRule]:
    """
    Load access_rules.json files from installed apps.

    Args:
        app_configs: Optional iterable of Django app configs. Defaults to all
            installed apps.

    Returns:
        Rules in app order, then file order.
    """
    if app_configs is None:
        app_configs = apps.get_app_configs()

    rules: list[AccessRule] = []
    for app_config in app_configs:
        app_path = getattr(app_config, "path", None)
        if not app_path:
            continue
        rules_path = Path(app_path) / RULES_FILENAME
        if not rules_path.exists():
            continue
        try:
            content = rules_path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            logger.warning("Could not read rules file %s: %s", rules_path, exc)
            continue
        if not content:
            logger.debug("Skipping empty rules file %s", rules_path)
            continue
        try:
            payload = json.loads(content)
        except json.JSONDecodeError as exc:
            logger.warning("Invalid JSON in rules file %s: %s", rules_path, exc)
            continue
        rules.extend(build_rules(_extract_rules(payload, rules_path), source=str(rules_path)))
    return rules


def build_rules(entries: Iterable[object], source: str = "settings") -> list[AccessRule]:
    rules: list[AccessRule] = []
    for entry in entries:
        if isinstance(entry, AccessRule):
            rules.append(entry)
            continue
        if not isinstance(entry, dict):
            logger.warning("Access rule entry in %s must be an object", source)
            continue
        try:
            rules.append(AccessRule.from_dict(entry))
        except RuleConfigurationError as exc:
            logger.warning("Skipping access rule %s from %s: %s", exc.rule_id, source, exc)
    return rules


def _extract_rules(payload: object, rules_path: Path) -> list[object]:
    if isinstance(payload, dict):
        rules = payload.get("rules", [])
    else:
        rules = payload
    if rules is None:
        return []
    if not isinstance(rules, list):
        logger.warning("Rules file %s must define a list of rules", rules_path)
        return []
    return rules


__all__ = ["load_configured_rules", "load_app_access_rules", "build_rules", "RULES_FILENAME"]
