"""Schema Validator: compile an entity schema once, validate many payloads.

Invariants:
    - validate() never raises for any decoded JSON input
    - None (empty or absent body) is validated as {} so each required key is reported
    - All violations are reported, each with a JSON-pointer path and a rule name
    - No side effects: the input value is never mutated or coerced in place
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

# pydantic error type -> rule name reported to clients
_RULES = {
    "missing": "required",
    "extra_forbidden": "additionalProperties",
}


@dataclass(frozen=True)
class ValidationIssue:
    """One structural violation: where it is and which rule it breaks."""
    path: str
    rule: str
    message: str

    def to_dict(self) -> dict:
        return {"path": self.path, "rule": self.rule, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: list[ValidationIssue] = field(default_factory=list)


class SchemaValidator:
    """Compiled checker for one entity schema."""

    def __init__(self, model: type[BaseModel]):
        self.model = model
        self._adapter = TypeAdapter(model)

    def validate(self, value: Any) -> ValidationResult:
        if value is None:
            value = {}
        try:
            self._adapter.validate_python(value)
        except PydanticValidationError as e:
            return ValidationResult(
                valid=False,
                errors=[_to_issue(err) for err in e.errors()],
            )
        return ValidationResult(valid=True)


def compile_schema(model: type[BaseModel]) -> SchemaValidator:
    return SchemaValidator(model)


def _to_issue(err: dict) -> ValidationIssue:
    path = "".join(f"/{part}" for part in err["loc"])
    rule = _RULES.get(err["type"], "type")
    return ValidationIssue(path=path, rule=rule, message=err["msg"])
