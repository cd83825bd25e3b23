"""Payload validation against Pydantic contracts.

``validate_payload`` is exhaustive: it collects every per-field violation
Pydantic reports, then evaluates the contract's cross-field rules against
the raw payload, and only then raises a single ``ValidationFailed`` holding
all of them.  Cross-field rules run even when per-field checks already
failed, so a client sees every problem in one round trip.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from saintshub_api.core.errors import ValidationFailed, Violation

ModelT = TypeVar("ModelT", bound=BaseModel)

CrossFieldRule = Callable[[Mapping[str, Any]], Violation | None]


def format_location(loc: Sequence[str | int], *, strip: tuple[str, ...] = ()) -> str:
    """Join a Pydantic error location into a dotted field path.

    Args:
        loc: Location tuple from a Pydantic error (``("securities", "deacons", 0, "names")``).
        strip: Leading location parts to drop (FastAPI prefixes ``body``/``query``/``path``).

    Returns:
        The dotted path, e.g. ``securities.deacons.0.names``.
    """
    parts = list(loc)
    if parts and parts[0] in strip:
        parts = parts[1:]
    return ".".join(str(part) for part in parts)


def violations_from_errors(
    errors: Iterable[Mapping[str, Any]],
    *,
    strip: tuple[str, ...] = (),
) -> list[Violation]:
    """Convert Pydantic/FastAPI error dicts into violations."""
    violations = []
    for error in errors:
        message = str(error.get("msg", "Invalid value"))
        # Pydantic prefixes messages raised from custom validators
        message = message.removeprefix("Value error, ")
        violations.append(Violation(path=format_location(error.get("loc", ()), strip=strip), message=message))
    return violations


def validate_payload(
    model: type[ModelT],
    payload: Mapping[str, Any],
    *,
    rules: Iterable[CrossFieldRule] = (),
) -> ModelT:
    """Validate a raw payload, collecting all violations before failing.

    Args:
        model: The Pydantic contract to validate against.
        payload: Raw request data (JSON body or form fields).
        rules: Cross-field rules evaluated after per-field checks.

    Returns:
        The validated, type-narrowed model instance.

    Raises:
        ValidationFailed: If any per-field check or cross-field rule failed.
    """
    violations: list[Violation] = []
    validated: ModelT | None = None
    try:
        validated = model.model_validate(payload)
    except ValidationError as exc:
        violations.extend(violations_from_errors(exc.errors(include_url=False)))

    for rule in rules:
        violation = rule(payload)
        if violation is not None:
            violations.append(violation)

    if violations or validated is None:
        raise ValidationFailed(violations)
    return validated
