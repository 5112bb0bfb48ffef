from dataclasses import dataclass, field
from typing import Any, List

from pydantic import ValidationError

from playgen.generation.models import RendererKind
from playgen.validation.renderer_schemas import renderer_config_adapter

_VALUE_ERROR_PREFIX = "Value error, "


@dataclass
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)


def _format_loc(loc) -> str:
    # loc[0] is the union tag, the rest points into the config
    return ".".join(str(part) for part in loc[1:])


def format_validation_error(exc: ValidationError) -> List[str]:
    """Flatten a pydantic ValidationError into ``"path: message"`` strings.

    Cross-reference checks report several issues joined by newlines, so those
    are split back into one entry per issue.
    """
    errors = []
    for err in exc.errors():
        path = _format_loc(err["loc"])
        msg = err["msg"]
        if msg.startswith(_VALUE_ERROR_PREFIX):
            msg = msg[len(_VALUE_ERROR_PREFIX):]
        for line in msg.splitlines():
            if line.strip():
                errors.append(f"{path}: {line}" if path else line)
    return errors


def validate_config(kind: Any, rounds: Any) -> ValidationResult:
    """Check a rounds payload against the rule set for ``kind``. Never raises."""
    kind_value = kind.value if isinstance(kind, RendererKind) else kind
    if kind_value not in {k.value for k in RendererKind.structured()}:
        return ValidationResult(valid=False, errors=[f"Unknown game type: {kind_value}"])

    if not isinstance(rounds, list) or not rounds:
        return ValidationResult(valid=False, errors=["rounds: Config must be a non-empty array of rounds"])

    try:
        renderer_config_adapter.validate_python({"type": kind_value, "rounds": rounds})
    except ValidationError as e:
        return ValidationResult(valid=False, errors=format_validation_error(e))
    return ValidationResult(valid=True)
