"""
Validation functions for configuration values.

Each validator normalises its input and raises ValidationError naming the
offending field when the value is unusable.
"""

from typing import Any, List, Optional, Tuple

from .exceptions import ValidationError


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within the given bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate that a value is a number within the given bounds.

    Raises:
        ValidationError: If validation fails
    """
    try:
        float_value = float(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid number, got {value}",
            field_name=field_name,
            value=value
        )
    if float_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and float_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {float_value}",
            field_name=field_name,
            value=value
        )
    return float_value


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Returns:
        The matching choice, in the casing used by `choices`

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)

    if case_sensitive:
        if str_value not in choices:
            raise ValidationError(
                f"{field_name} must be one of {choices}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choices]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choices}, got {value}",
            field_name=field_name,
            value=value
        )
    return choices[lower_choices.index(lower_value)]


def validate_boolean(value: Any, field_name: str = "value") -> bool:
    """
    Validate a boolean, accepting the usual string spellings from env vars.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off", ""):
            return False
    raise ValidationError(
        f"{field_name} must be a boolean, got {value}",
        field_name=field_name,
        value=value
    )


def validate_string_list(value: Any, field_name: str = "value") -> List[str]:
    """
    Validate a list of non-empty strings.

    A comma separated string is split, so the same value can come from an
    environment variable or a TOML array.
    """
    if isinstance(value, str):
        items = [item.strip() for item in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = []
        for item in value:
            if not isinstance(item, str):
                raise ValidationError(
                    f"{field_name} must contain only strings, got {item!r}",
                    field_name=field_name,
                    value=value
                )
            items.append(item.strip())
    else:
        raise ValidationError(
            f"{field_name} must be a list of strings, got {value}",
            field_name=field_name,
            value=value
        )
    return [item for item in items if item]


def validate_bind_address(value: Any, field_name: str = "bind_address") -> Tuple[str, int]:
    """
    Validate a `host:port` listen address.

    An empty host (":8080") means all interfaces.

    Returns:
        (host, port) tuple
    """
    if not isinstance(value, str) or ":" not in value:
        raise ValidationError(
            f"{field_name} must have the form [host]:port, got {value}",
            field_name=field_name,
            value=value
        )
    host, _, port_str = value.rpartition(":")
    port = validate_positive_integer(
        port_str, min_value=0, max_value=65535, field_name=f"{field_name} port"
    )
    return host.strip("[]"), port
