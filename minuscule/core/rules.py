"""Validation Rules — normalized, resolved representation of a declarative rule set.

Invariants:
    - Every validator form resolves once into a closed set of Check variants:
      PrimitiveCheck, InstanceCheck, PredicateCheck, SequenceCheck
    - Rule set order is evaluation order (dict insertion order is preserved)
    - Malformed rule sets raise RuleSetError at compile time, never mid-validation
    - MISSING (not None) marks "no default": None is a legitimate default value

Design Decisions:
    - Resolve at compile time, not per call: validate() never inspects callables
      or types again (ADR: dispatch cost paid once per rule set)
    - Predicate arity inspected once: fn(value) and fn(value, context) both accepted
    - bool excluded from NUMBER: True is an int in Python but not a number in a payload
"""

import inspect
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from minuscule.core.errors import RuleSetError


class _Missing:
    """Sentinel type for 'no default configured'."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

RULE_KEYS = frozenset({"validator", "required", "default", "requires", "error"})


# ─── Check Variants ──────────────────────────────────────────────

class PrimitiveKind(str, Enum):
    """Primitive type tags accepted as validators."""
    STRING = "a string"
    NUMBER = "a number"
    BOOLEAN = "a boolean"


class Check:
    """Base for resolved validators."""

    def find_rejection(self, value: Any, context: Mapping[str, Any]) -> "Check | None":
        """Return the check that rejected `value`, or None when accepted."""
        raise NotImplementedError

    def describe(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class PrimitiveCheck(Check):
    kind: PrimitiveKind

    def find_rejection(self, value, context):
        if self.kind is PrimitiveKind.STRING:
            ok = isinstance(value, str)
        elif self.kind is PrimitiveKind.BOOLEAN:
            ok = isinstance(value, bool)
        else:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        return None if ok else self

    def describe(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class InstanceCheck(Check):
    cls: type

    def find_rejection(self, value, context):
        return None if isinstance(value, self.cls) else self

    def describe(self) -> str:
        return f"an instance of {self.cls.__name__}"


@dataclass(frozen=True)
class PredicateCheck(Check):
    fn: Callable[..., Any]
    wants_context: bool = False

    def find_rejection(self, value, context):
        accepted = self.fn(value, context) if self.wants_context else self.fn(value)
        return None if accepted else self

    def describe(self) -> str:
        name = getattr(self.fn, "__name__", None)
        if not name or name == "<lambda>":
            return "accepted by its validator"
        return f"accepted by {name}"


@dataclass(frozen=True)
class SequenceCheck(Check):
    """All checks must accept, in order; stops at the first rejection."""
    checks: tuple[Check, ...] = ()

    def find_rejection(self, value, context):
        for check in self.checks:
            rejected = check.find_rejection(value, context)
            if rejected is not None:
                return rejected
        return None

    def describe(self) -> str:
        return " and ".join(check.describe() for check in self.checks) or "anything"


_PRIMITIVES: dict[type, PrimitiveKind] = {
    str: PrimitiveKind.STRING,
    int: PrimitiveKind.NUMBER,
    float: PrimitiveKind.NUMBER,
    bool: PrimitiveKind.BOOLEAN,
}


def _wants_context(fn: Callable[..., Any]) -> bool:
    """True when fn can take a second positional argument."""
    try:
        params = inspect.signature(fn).parameters.values()
    except (TypeError, ValueError):
        return False
    positional = 0
    for param in params:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1
    return positional >= 2


def resolve_check(spec: Any, field_name: str = "") -> Check:
    """Resolve a validator spec (type tag, class, callable, or list) into a Check."""
    if isinstance(spec, Check):
        return spec
    if isinstance(spec, type):
        kind = _PRIMITIVES.get(spec)
        return PrimitiveCheck(kind) if kind else InstanceCheck(spec)
    if isinstance(spec, (list, tuple)):
        return SequenceCheck(tuple(resolve_check(s, field_name) for s in spec))
    if callable(spec):
        return PredicateCheck(spec, _wants_context(spec))
    raise RuleSetError(
        f"validator for {field_name or 'rule'} must be a type, a callable, "
        f"or a list of them, got {type(spec).__name__}"
    )


# ─── Rules ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Rule:
    """How one field is checked and defaulted."""
    check: Check = field(default_factory=SequenceCheck)
    required: bool = False
    default: Any = MISSING
    requires: tuple[str, ...] = ()
    error: str | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING


@dataclass(frozen=True)
class CrossFieldRule:
    """A check spanning several fields, run against the validated result."""
    validator: Callable[[Mapping[str, Any]], Any]
    error: str = "cross-field validation failed"


@dataclass(frozen=True)
class RuleSet:
    """A compiled, reusable rule set."""
    rules: tuple[tuple[str, Rule], ...]
    cross_field: tuple[CrossFieldRule, ...] = ()


def _normalize_requires(name: str, requires: Any) -> tuple[str, ...]:
    if requires is None:
        return ()
    if isinstance(requires, (str, bytes)) or not isinstance(requires, (list, tuple)):
        raise RuleSetError(f"{name}: requires must be a list of field names")
    if not all(isinstance(dep, str) for dep in requires):
        raise RuleSetError(f"{name}: requires must contain only field names")
    return tuple(requires)


def normalize_rule(name: str, spec: Any) -> Rule:
    """Normalize a Rule, a rule mapping, or a bare validator into a Rule."""
    if isinstance(spec, Rule):
        return spec
    if not isinstance(spec, Mapping):
        return Rule(check=resolve_check(spec, name))
    unknown = set(spec) - RULE_KEYS
    if unknown:
        raise RuleSetError(f"{name}: unknown rule keys {sorted(unknown)}")
    error = spec.get("error")
    if error is not None and not isinstance(error, str):
        raise RuleSetError(f"{name}: error must be a string")
    validator = spec.get("validator")
    return Rule(
        check=SequenceCheck() if validator is None else resolve_check(validator, name),
        required=bool(spec.get("required", False)),
        default=spec.get("default", MISSING),
        requires=_normalize_requires(name, spec.get("requires")),
        error=error,
    )


def normalize_cross_field(spec: Any) -> CrossFieldRule:
    if isinstance(spec, CrossFieldRule):
        return spec
    if isinstance(spec, Mapping):
        validator = spec.get("validator")
        if not callable(validator):
            raise RuleSetError("cross-field validator must be callable")
        error = spec.get("error")
        if error is None:
            return CrossFieldRule(validator)
        return CrossFieldRule(validator, str(error))
    if callable(spec):
        return CrossFieldRule(spec)
    raise RuleSetError(
        f"cross-field validator must be callable or a mapping, got {type(spec).__name__}"
    )


def compile_rule_set(
    rules: Any, cross_field_validators: Any = None,
) -> RuleSet:
    """Compile a rule mapping (+ optional cross-field validators) into a RuleSet.

    Dependency fields named in `requires` are looked up in the raw input, so
    list them before their dependents when a validator also reads them from
    the context.
    """
    if isinstance(rules, RuleSet):
        if cross_field_validators is None:
            return rules
        extra = _compile_cross_field(cross_field_validators)
        return RuleSet(rules.rules, rules.cross_field + extra)
    if not isinstance(rules, Mapping):
        raise RuleSetError("rule set must be a mapping of field names to rules")
    compiled = []
    for name, spec in rules.items():
        if not isinstance(name, str) or not name:
            raise RuleSetError(f"rule set keys must be field names, got {name!r}")
        compiled.append((name, normalize_rule(name, spec)))
    return RuleSet(tuple(compiled), _compile_cross_field(cross_field_validators))


def _compile_cross_field(specs: Any) -> tuple[CrossFieldRule, ...]:
    if specs is None:
        return ()
    if not isinstance(specs, (list, tuple)):
        raise RuleSetError("cross-field validators must be a list")
    return tuple(normalize_cross_field(spec) for spec in specs)
