"""Validation and normalization of risk point payloads and query arguments."""

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from numbers import Real
from typing import Any

from riskzones.config import LimitsConfig

LONGITUDE_PATTERN = re.compile(r"^[-+]?(180(\.0+)?|(1[0-7]\d|[1-9]?\d)(\.\d+)?)$")
LATITUDE_PATTERN = re.compile(r"^[-+]?(90(\.0+)?|[1-8]?\d(\.\d+)?)$")
INTEGER_PATTERN = re.compile(r"^[-+]?\d+$")
DELTA_PATTERN = re.compile(r"^(\d{1,3}(\.\d*)?|\.\d+)$")
MEDIUM_STRING_PATTERN = re.compile(r"^[^\x00-\x1f\x7f]+$")


@dataclass
class ValidationResult:
    """Outcome of a validation pass.

    ``value`` holds the normalized input when validation succeeded.
    """

    errors: list[str] = field(default_factory=list)
    value: Any = None

    @property
    def valid(self) -> bool:
        return not self.errors

    def __bool__(self) -> bool:
        return self.valid


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def _parse_degrees(value: Any, pattern: re.Pattern, limit: float) -> float | None:
    if isinstance(value, str):
        text = value.strip()
        return float(text) if pattern.match(text) else None
    if _is_number(value) and -limit <= value <= limit:
        return float(value)
    return None


def parse_longitude(value: Any) -> float | None:
    """Return the longitude as a float, or None if it is not valid."""
    return _parse_degrees(value, LONGITUDE_PATTERN, 180.0)


def parse_latitude(value: Any) -> float | None:
    """Return the latitude as a float, or None if it is not valid."""
    return _parse_degrees(value, LATITUDE_PATTERN, 90.0)


def parse_integer(value: Any) -> int | None:
    """Return an integral value as int, or None.

    Floats are accepted only when they carry no fractional part.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str) and INTEGER_PATTERN.match(value.strip()):
        return int(value.strip())
    return None


def parse_delta(value: Any) -> float | None:
    """Return a positive fractional-degree delta, or None."""
    if isinstance(value, str):
        text = value.strip()
        if not DELTA_PATTERN.match(text):
            return None
        value = float(text)
    if not _is_number(value) or value <= 0:
        return None
    return float(value)


def is_medium_string(value: Any, max_length: int) -> bool:
    """Check for a non-empty, single-line string of bounded length."""
    if not isinstance(value, str):
        return False
    text = value.strip()
    return 0 < len(text) <= max_length and bool(MEDIUM_STRING_PATTERN.match(text))


def validate_coordinate(value: Any, name: str = "locpoint") -> ValidationResult:
    """Validate a [lon, lat] pair.

    Args:
        value: Candidate coordinate.
        name: Field name used in error reports.

    Returns:
        ValidationResult whose value is ``[lon, lat]`` as floats.
    """
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 2:
        return ValidationResult(errors=[name])

    errors = []
    lon = parse_longitude(value[0])
    if lon is None:
        errors.append(f"{name}[0]")
    lat = parse_latitude(value[1])
    if lat is None:
        errors.append(f"{name}[1]")

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=[lon, lat])


def _validate_bounded_int(
    item: Mapping[str, Any], key: str, minimum: int, maximum: int, prefix: str
) -> tuple[int | None, str | None]:
    number = parse_integer(item.get(key))
    if number is None or not minimum <= number <= maximum:
        return None, f"{prefix}.{key}"
    return number, None


def validate_point(item: Any, limits: LimitsConfig, prefix: str = "") -> ValidationResult:
    """Validate a single batch record: title, locpoint, radius and risk."""
    if not isinstance(item, Mapping):
        return ValidationResult(errors=[prefix or "point"])

    errors = []

    title = item.get("title")
    if not is_medium_string(title, limits.title_max_length):
        errors.append(f"{prefix}.title")

    coordinate = validate_coordinate(item.get("locpoint"), f"{prefix}.locpoint")
    errors.extend(coordinate.errors)

    radius, error = _validate_bounded_int(item, "radius", limits.radius_min, limits.radius_max, prefix)
    if error:
        errors.append(error)

    risk, error = _validate_bounded_int(item, "risk", limits.risk_min, limits.risk_max, prefix)
    if error:
        errors.append(error)

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(value={
        "title": title.strip(),
        "locpoint": coordinate.value,
        "radius": radius,
        "risk": risk,
    })


def validate_batch(records: Any, limits: LimitsConfig) -> ValidationResult:
    """Validate a batch insert payload.

    The batch is accepted only when its size is within the configured bounds
    and every record is valid.

    Args:
        records: List of ``{title, locpoint, radius, risk}`` mappings.
        limits: Configured bounds.

    Returns:
        ValidationResult whose value is the list of normalized records.
    """
    if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Sequence):
        return ValidationResult(errors=["batch"])
    if not limits.add_batch_min <= len(records) <= limits.add_batch_max:
        return ValidationResult(errors=["batch.size"])

    errors = []
    points = []
    for index, item in enumerate(records):
        result = validate_point(item, limits, prefix=f"[{index}]")
        if result:
            points.append(result.value)
        else:
            errors.extend(result.errors)

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=points)


def validate_nearby_query(args: Any, limits: LimitsConfig) -> ValidationResult:
    """Validate nearby-search arguments.

    ``grvpoint`` and ``delta`` are mandatory; ``locpoint`` is only checked
    when present.

    Returns:
        ValidationResult whose value is ``{"grvpoint", "locpoint", "delta"}``.
    """
    if not isinstance(args, Mapping):
        return ValidationResult(errors=["args"])

    errors = []

    locpoint = None
    if args.get("locpoint") is not None:
        result = validate_coordinate(args["locpoint"], "locpoint")
        errors.extend(result.errors)
        locpoint = result.value

    grvpoint = validate_coordinate(args.get("grvpoint"), "grvpoint")
    errors.extend(grvpoint.errors)

    delta = parse_delta(args.get("delta"))
    if delta is None or (limits.delta_max is not None and delta > limits.delta_max):
        errors.append("delta")

    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value={"grvpoint": grvpoint.value, "locpoint": locpoint, "delta": delta})
