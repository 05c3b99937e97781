"""Conversion between the wire aggregate and ``RegistryState``."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, TypeVar

from clubhub.domain.registry import models, policy

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DecodeError(ValueError):
	"""Aggregate payload could not be turned into a registry state."""


def _records(payload: Mapping[str, Any], key: str, build: Callable[[Mapping[str, Any]], T]) -> List[T]:
	raw = payload.get(key) or []
	if not isinstance(raw, list):
		logger.warning("sync_decode_not_a_list", extra={"event": "sync_decode_not_a_list", "collection": key})
		return []
	items: List[T] = []
	for entry in raw:
		if not isinstance(entry, Mapping):
			logger.warning("sync_decode_skipped", extra={"event": "sync_decode_skipped", "collection": key})
			continue
		items.append(build(entry))
	return items


def _club(entry: Mapping[str, Any]) -> models.Club:
	club = models.Club.from_mapping(entry, default_capacity=policy.DEFAULT_CAPACITY)
	if entry.get("capacity") in (None, ""):
		club.capacity = policy.default_capacity(club.co_advisor_id)
	return club


def decode_aggregate(payload: Mapping[str, Any]) -> models.RegistryState:
	"""Build a state from either the nested or the legacy flat settings layout.

	Empty announcement lists and empty rule lists fall back to the initial
	content so a freshly created sheet still renders a usable home page.
	"""
	try:
		return _decode(payload)
	except (TypeError, ValueError, OverflowError, AttributeError) as exc:
		raise DecodeError(f"undecodable aggregate: {exc}") from exc


def _decode(payload: Mapping[str, Any]) -> models.RegistryState:
	settings_raw = payload.get("settings")
	if not isinstance(settings_raw, Mapping):
		settings_raw = payload
	is_open = settings_raw.get("isSystemOpen", settings_raw.get("is_system_open"))
	rules_raw = settings_raw.get("registrationRules", settings_raw.get("registration_rules"))
	rules = [str(rule).strip() for rule in rules_raw or [] if str(rule).strip()] if isinstance(rules_raw, list) else []

	announcements = _records(payload, "announcements", models.Announcement.from_mapping)
	return models.RegistryState(
		teachers=_records(payload, "teachers", models.Teacher.from_mapping),
		students=_records(payload, "students", models.Student.from_mapping),
		clubs=_records(payload, "clubs", _club),
		announcements=announcements or models.initial_announcements(),
		settings=models.RegistrySettings(
			is_system_open=True if is_open is None else models.parse_flag(is_open, default=True),
			registration_rules=rules or list(models.DEFAULT_RULES),
		),
	)


def encode_aggregate(state: models.RegistryState) -> Dict[str, Any]:
	return {
		"teachers": [t.to_dict() for t in state.teachers],
		"students": [s.to_dict() for s in state.students],
		"clubs": [c.to_dict() for c in state.clubs],
		"announcements": [a.to_dict() for a in state.announcements],
		"settings": state.settings.to_dict(),
	}
