"""Parsers for data sources and template files."""

from .data_source_parser import (
    DataSourceParser,
    DataSourceParseError,
    CSV_EXTENSIONS,
    EXCEL_EXTENSIONS,
    dataframe_to_data_source,
    load_data_source,
)

from .template_io import (
    TemplateFormatError,
    template_to_json,
    template_from_json,
    save_template_file,
    load_template_file,
    template_from_image,
    template_from_pdf,
    template_from_docx,
    parse_template_file,
)

from .validators import (
    ValidationError,
    ValidationResult,
    validate_columns,
    validate_data_source,
    validate_template,
)

__all__ = [
    # Data source
    "DataSourceParser",
    "DataSourceParseError",
    "CSV_EXTENSIONS",
    "EXCEL_EXTENSIONS",
    "dataframe_to_data_source",
    "load_data_source",
    # Template files
    "TemplateFormatError",
    "template_to_json",
    "template_from_json",
    "save_template_file",
    "load_template_file",
    "template_from_image",
    "template_from_pdf",
    "template_from_docx",
    "parse_template_file",
    # Validators
    "ValidationError",
    "ValidationResult",
    "validate_columns",
    "validate_data_source",
    "validate_template",
]
