"""Validation utilities for data sources and templates."""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..models import DataSource, Template


@dataclass
class ValidationError:
    """Represents a validation error."""
    field: str
    message: str
    row: Optional[int] = None
    value: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of a validation operation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[ValidationError]

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(is_valid=True, errors=[], warnings=[])

    def add_error(self, error: ValidationError):
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: ValidationError):
        self.warnings.append(warning)

    @property
    def missing_columns(self) -> List[str]:
        return [e.field for e in self.errors if e.message.startswith("Required column missing")]


def _normalize(value: str) -> str:
    return str(value).strip().lower()


def validate_columns(headers: Sequence[str], required: Sequence[str] = ()) -> ValidationResult:
    """
    Check that every required column is present (case-insensitive).

    Args:
        headers: Column headers from the data source
        required: Required column names

    Returns:
        ValidationResult with one error per missing column
    """
    result = ValidationResult.success()
    normalized = [_normalize(h) for h in headers]

    for column in required:
        if _normalize(column) in normalized:
            continue
        result.add_error(ValidationError(
            field=column,
            message=f"Required column missing: {column}",
        ))

    return result


def validate_data_source(source: DataSource, template: Optional[Template] = None) -> ValidationResult:
    """
    Validate a data source, optionally against the fields a template binds.

    Missing bound columns are errors; blank values in bound columns are
    warnings because they still render (as empty text).
    """
    result = ValidationResult.success()

    if not source.headers:
        result.add_error(ValidationError(field="headers", message="Data source has no headers"))
        return result
    if not source.rows:
        result.add_error(ValidationError(field="rows", message="Data source has no rows"))

    if template is None:
        return result

    bound = template.dynamic_fields()
    column_check = validate_columns(source.headers, bound)
    for error in column_check.errors:
        result.add_error(error)

    present = [f for f in bound if f in source.headers]
    for row_number, row in enumerate(source.rows, start=1):
        for field_name in present:
            if not str(row.get(field_name, "")).strip():
                result.add_warning(ValidationError(
                    field=field_name,
                    message=f"Empty value for {field_name}",
                    row=row_number,
                    value="",
                ))

    return result


def validate_template(template: Template) -> ValidationResult:
    """
    Validate template structure.

    Duplicate element ids are errors; unbound dynamic text and elements
    starting outside the page are warnings.
    """
    result = ValidationResult.success()

    seen = set()
    for element in template.elements:
        if element.id in seen:
            result.add_error(ValidationError(
                field="id",
                message=f"Duplicate element id: {element.id}",
                value=element.id,
            ))
        seen.add(element.id)

        if not (0 <= element.x <= template.width_mm and 0 <= element.y <= template.height_mm):
            result.add_warning(ValidationError(
                field=element.id,
                message=f"Element {element.id} starts outside the page",
            ))

    for element in template.text_elements():
        if element.is_dynamic and not element.data_field:
            result.add_warning(ValidationError(
                field=element.id,
                message=f"Dynamic text {element.id} has no data field",
            ))

    return result
