"""
Required-field checks shared by every mutating endpoint.

Each endpoint declares its rules up front; ``validate`` evaluates all of them
before any database access and raises a single ValidationError listing every
failure, not just the first.
"""

from typing import Any, Callable, Iterable, List, NamedTuple

from social_api.exceptions import ValidationError


class Rule(NamedTuple):
    field: str
    message: str
    check: Callable[[Any], bool]


def not_empty(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) > 0
    return True


def required(field: str, message: str = None) -> Rule:
    return Rule(field, message or f"{field.replace('_', ' ').capitalize()} is Required", not_empty)


def field_error(field: str, message: str, value: Any = None, location: str = "body") -> dict:
    return {"msg": message, "param": field, "value": value, "location": location}


def collect_errors(body: dict, rules: Iterable[Rule]) -> List[dict]:
    errors = []
    for rule in rules:
        value = body.get(rule.field)
        if not rule.check(value):
            errors.append(field_error(rule.field, rule.message, value))
    return errors


def validate(body: dict, rules: Iterable[Rule]) -> dict:
    errors = collect_errors(body, rules)
    if errors:
        raise ValidationError(errors)
    return body
