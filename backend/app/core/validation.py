"""Input Validation — rule tables interpreted by a single generic routine.

Invariants:
    - A Schema is an ordered tuple of Rule(field, constraint, message, args)
    - Field order = first appearance in the rule table; message order = rule order
    - Strings are stripped before any constraint runs; "" after stripping means absent
    - Absent value: only REQUIRED rules fire, every other rule is skipped
    - A failed type rule (STRING, INTEGER) stops checking that field
    - INTEGER args, when given, are inclusive (min, max) bounds on the coerced value
    - Unknown fields fail the whole payload (never silently dropped)
    - Success returns schema.model(**values) with exactly the declared fields

Design Decisions:
    - Explicit tables over per-field decorators: the contract is data, testable in isolation
    - Aliases resolved before checking; errors always keyed by the canonical field name
    - Pure functions only: no FastAPI, no IO (core layer)
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel

from app.core.errors import ValidationError

BODY_FIELD = "body"
NOT_AN_OBJECT_MESSAGE = "El cuerpo de la petición debe ser un objeto JSON"


class Constraint(str, Enum):
    """Constraint kinds understood by validate()."""
    REQUIRED = "required"
    STRING = "string"
    LENGTH = "length"
    ONE_OF = "one_of"
    INTEGER = "integer"
    ISO_DATE = "iso_date"


@dataclass(frozen=True)
class Rule:
    """One row of a schema table."""
    field: str
    constraint: Constraint
    message: str
    args: tuple = ()


@dataclass(frozen=True)
class Schema:
    """Ordered constraint table for one input shape."""
    name: str
    model: type[BaseModel]
    rules: tuple[Rule, ...]
    aliases: Mapping[str, str] = field(default_factory=dict)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(rule.field for rule in self.rules))

    def rules_for(self, name: str) -> tuple[Rule, ...]:
        return tuple(rule for rule in self.rules if rule.field == name)


_TYPE_CONSTRAINTS = frozenset({Constraint.STRING, Constraint.INTEGER})


def validate(schema: Schema, raw: Any) -> BaseModel:
    """Validate and transform raw input against schema.

    Raises ValidationError carrying {field: [messages]} on any failure.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(errors={BODY_FIELD: [NOT_AN_OBJECT_MESSAGE]})

    errors: dict[str, list[str]] = {}
    supplied = _resolve_aliases(schema, raw, errors)

    values: dict[str, Any] = {}
    for name in schema.fields:
        value = _normalize(supplied.get(name))
        messages, value = _check_field(schema.rules_for(name), value)
        if messages:
            errors[name] = messages
        values[name] = value

    if errors:
        raise ValidationError(errors=errors)
    return schema.model(**values)


def _resolve_aliases(
    schema: Schema, raw: Mapping, errors: dict[str, list[str]],
) -> dict[str, Any]:
    """Map supplied keys to canonical names, recording unknown or duplicated keys."""
    declared = set(schema.fields)
    supplied: dict[str, Any] = {}
    for key, value in raw.items():
        name = schema.aliases.get(key, key)
        if name not in declared:
            errors.setdefault(str(key), []).append(
                f"La propiedad {key} no está permitida",
            )
        elif name in supplied:
            errors.setdefault(name, []).append(
                f"La propiedad {name} fue enviada más de una vez",
            )
        else:
            supplied[name] = value
    return supplied


def _normalize(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    return value


def _check_field(rules: tuple[Rule, ...], value: Any) -> tuple[list[str], Any]:
    messages: list[str] = []
    for rule in rules:
        if value is None:
            if rule.constraint is Constraint.REQUIRED:
                messages.append(rule.message)
            continue
        ok, value = _CHECKS[rule.constraint](value, rule.args)
        if not ok:
            messages.append(rule.message)
            if rule.constraint in _TYPE_CONSTRAINTS:
                break
    return messages, value


# ─── Constraint checks: (value, args) -> (ok, transformed value) ──

def _check_required(value: Any, args: tuple) -> tuple[bool, Any]:
    return value is not None, value


def _check_string(value: Any, args: tuple) -> tuple[bool, Any]:
    return isinstance(value, str), value


def _check_length(value: Any, args: tuple) -> tuple[bool, Any]:
    low, high = args
    return isinstance(value, str) and low <= len(value) <= high, value


def _check_one_of(value: Any, args: tuple) -> tuple[bool, Any]:
    return value in args, value


def _check_integer(value: Any, args: tuple) -> tuple[bool, Any]:
    if isinstance(value, bool):
        return False, value
    if isinstance(value, str):
        digits = value[1:] if value[:1] in "+-" else value
        if not (digits.isascii() and digits.isdigit()):
            return False, value
        value = int(value)
    if not isinstance(value, int):
        return False, value
    if args:
        low, high = args
        return low <= value <= high, value
    return True, value


def _check_iso_date(value: Any, args: tuple) -> tuple[bool, Any]:
    if not isinstance(value, str):
        return False, value
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return False, value
    return True, value


_CHECKS = {
    Constraint.REQUIRED: _check_required,
    Constraint.STRING: _check_string,
    Constraint.LENGTH: _check_length,
    Constraint.ONE_OF: _check_one_of,
    Constraint.INTEGER: _check_integer,
    Constraint.ISO_DATE: _check_iso_date,
}
