"""Payload Validation — evaluates a flat key/value payload against a rule set.

Invariants:
    - Single pass, in rule set order; the first failing check aborts the call
    - No partial result is ever returned; no coercion (accepted values are the raw values)
    - Unknown input fields are dropped from the result
    - `requires` is checked against the RAW input's keys, not the result,
      so a dependency that would only receive a default still fails
    - Cross-field validators run only after every field rule passed

Design Decisions:
    - Raises WebError(400) for client data, RuleSetError (500) for rule bugs:
      the reporter maps both without special cases
    - Predicates see a read-only view of the result so far: context access
      without letting a validator rewrite already-accepted fields
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from minuscule.core.errors import WebError
from minuscule.core.rules import Rule, RuleSet, compile_rule_set


def validate(
    payload: Any, rule_set: Any, cross_field_validators: Any = None,
) -> dict[str, Any]:
    """Validate `payload` against `rule_set`; return the sanitized fields.

    `rule_set` is a mapping of field name to rule (or a compiled RuleSet).
    Raises WebError(400) on the first violation.
    """
    compiled = compile_rule_set(rule_set, cross_field_validators)
    if not isinstance(payload, Mapping):
        raise WebError(400, "request body must be a key/value object")

    result: dict[str, Any] = {}
    context = MappingProxyType(result)
    for name, rule in compiled.rules:
        if name not in payload:
            _apply_absent(name, rule, result)
            continue
        _check_requires(name, rule, payload)
        value = payload[name]
        rejected = rule.check.find_rejection(value, context)
        if rejected is not None:
            raise WebError(400, rule.error or f"{name} must be {rejected.describe()}")
        result[name] = value

    _check_cross_field(compiled, context)
    return result


def _apply_absent(name: str, rule: Rule, result: dict[str, Any]) -> None:
    if rule.required:
        raise WebError(400, f"{name} is required")
    if rule.has_default:
        result[name] = rule.default


def _check_requires(name: str, rule: Rule, payload: Mapping[str, Any]) -> None:
    for dependency in rule.requires:
        if dependency not in payload:
            raise WebError(400, f"{name} requires {dependency}")


def _check_cross_field(compiled: RuleSet, context: Mapping[str, Any]) -> None:
    for cross in compiled.cross_field:
        if not cross.validator(context):
            raise WebError(400, cross.error)
