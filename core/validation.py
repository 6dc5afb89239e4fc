"""
Declarative field checks for request payloads.

A rule set is a plain list of ``Rule`` objects evaluated eagerly and in
order, so the violation list is deterministic:

    violations = validate(PROFILE_RULES, {"skills": "python"})
    # [Violation(field="status", message="Status is required", ...)]
"""

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .exceptions import ValidationFailed

Predicate = Callable[[Any], bool]


def present(value: Any) -> bool:
    return value is not None


def not_empty(value: Any) -> bool:
    """False for None, blank strings and empty collections."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


# Largest value the INTEGER primary key columns hold on every supported backend
MAX_RECORD_ID = 2**31 - 1

_RECORD_ID_PATTERN = re.compile(r"[0-9]{1,10}")


def parse_record_id(value: Any) -> int | None:
    """
    Integer id the store can hold, or None.

    Only plain ASCII digit strings (or ints) between 1 and ``MAX_RECORD_ID``
    are accepted; signs, underscores and whitespace are not.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str) or not _RECORD_ID_PATTERN.fullmatch(value):
        return None
    number = int(value)
    return number if 0 < number <= MAX_RECORD_ID else None


@dataclass(frozen=True)
class Rule:
    field: str
    predicate: Predicate
    message: str


@dataclass(frozen=True)
class Violation:
    field: str
    message: str
    value: Any = None
    location: str = "body"

    def to_dict(self) -> dict:
        return {
            "param": self.field,
            "msg": self.message,
            "value": self.value,
            "location": self.location,
        }


PROFILE_RULES: list[Rule] = [
    Rule("status", not_empty, "Status is required"),
    Rule("skills", not_empty, "Skills is required"),
]

EXPERIENCE_RULES: list[Rule] = [
    Rule("title", not_empty, "Title is required"),
    Rule("company", not_empty, "Company is required"),
    Rule("from", not_empty, "from date is required"),
]


def validate(rules: Sequence[Rule], payload: Mapping[str, Any]) -> list[Violation]:
    """Return every violation in rule order; an empty list means valid."""
    violations = []
    for rule in rules:
        value = payload.get(rule.field)
        if not rule.predicate(value):
            violations.append(Violation(field=rule.field, message=rule.message, value=value))
    return violations


def ensure_valid(rules: Sequence[Rule], payload: Mapping[str, Any]) -> None:
    """
    Raise ``ValidationFailed`` carrying all violations.

    Raises:
        ValidationFailed: If any rule fails
    """
    violations = validate(rules, payload)
    if violations:
        raise ValidationFailed(violations)


__all__ = [
    "Rule",
    "Violation",
    "present",
    "not_empty",
    "MAX_RECORD_ID",
    "parse_record_id",
    "PROFILE_RULES",
    "EXPERIENCE_RULES",
    "validate",
    "ensure_valid",
]
