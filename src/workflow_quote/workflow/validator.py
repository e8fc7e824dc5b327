"""
n8n workflow validation.

Validation runs in three tiers: a strict pydantic schema of an n8n export,
a lenient structural check (a nodes list with at least one typed node), and
an ultra-lenient mode that accepts any JSON object or array as generic data.
Only scalars, null, and price-table files uploaded by mistake are rejected.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..config.settings import DEFAULT_MAX_UPLOAD_BYTES

logger = logging.getLogger(__name__)


class N8nNode(BaseModel):
    """A node as exported by n8n."""
    model_config = ConfigDict(extra='allow')

    name: str
    type: str
    position: Annotated[list[float], Field(min_length=2, max_length=2)]
    parameters: dict[str, Any]
    id: Optional[str] = None
    typeVersion: Optional[float] = None


class N8nWorkflow(BaseModel):
    """Top-level n8n workflow export."""
    model_config = ConfigDict(extra='allow')

    nodes: list[N8nNode]
    connections: dict[str, Any]
    name: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of workflow validation."""
    is_valid: bool
    message: str
    error: Optional[str] = None
    details: dict = field(default_factory=dict)
    warning: Optional[str] = None
    is_generic_json: bool = False

    def to_dict(self) -> dict:
        data = {"isValid": self.is_valid, "message": self.message}
        if self.error:
            data["error"] = self.error
        if self.details:
            data["details"] = self.details
        if self.warning:
            data["warning"] = self.warning
        if self.is_generic_json:
            data["isGenericJson"] = True
        return data


def _describe_schema_error(exc: ValidationError) -> dict:
    """Path and reason for the first schema error."""
    first = exc.errors()[0]
    path = ".".join(str(p) for p in first.get('loc', ())) or 'root'
    err_type = first.get('type', '')

    if err_type == 'missing':
        reason = "missing required field"
    elif err_type.endswith('_type') or err_type.endswith('_parsing'):
        reason = f"invalid type: {first.get('msg', '')}"
    else:
        reason = first.get('msg') or "validation failed"

    return {"path": path, "reason": reason}


def validate_workflow(data: Any) -> ValidationResult:
    """Validate decoded workflow JSON."""
    if isinstance(data, dict) and 'node_types' in data and 'nodes' not in data:
        return ValidationResult(
            is_valid=False,
            error='INVALID_FILE_TYPE',
            message=(
                'This file appears to be a translation key (pricing database) file, '
                'not an n8n workflow file. Please upload an n8n workflow JSON file '
                'exported from n8n that contains "nodes" and "connections" properties.'
            ),
            details={
                "path": "root",
                "reason": "File structure matches translation key format, not n8n workflow format",
            },
        )

    try:
        N8nWorkflow.model_validate(data)
        return ValidationResult(is_valid=True, message='Workflow validation successful')
    except ValidationError as e:
        schema_error = e

    # Lenient: a nodes list with at least one typed node is enough
    nodes = data.get('nodes') if isinstance(data, dict) else None
    if isinstance(nodes, list) and nodes:
        if any(isinstance(node, dict) and node.get('type') for node in nodes):
            logger.warning("Workflow passed basic validation (lenient mode) but failed strict schema validation")
            return ValidationResult(
                is_valid=True,
                message='Workflow validation successful (lenient mode)',
                warning='Some optional fields may be missing, but workflow structure is valid',
            )

    # Ultra-lenient: any JSON object or array is processed as generic data
    if isinstance(data, (dict, list)):
        logger.warning("Accepting non-workflow JSON in ultra-lenient mode")
        return ValidationResult(
            is_valid=True,
            message='JSON file accepted (ultra-lenient mode)',
            warning='This does not appear to be an n8n workflow, but will be processed as generic JSON data',
            is_generic_json=True,
        )

    return ValidationResult(
        is_valid=False,
        error='INVALID_N8N_SCHEMA',
        message='Invalid n8n workflow: expected a JSON object with "nodes" and "connections"',
        details=_describe_schema_error(schema_error),
    )


def validate_file_size(file_size: int, max_size: int = DEFAULT_MAX_UPLOAD_BYTES) -> ValidationResult:
    """Reject files larger than max_size bytes."""
    if file_size > max_size:
        size_mb = round(file_size / (1024 * 1024), 2)
        return ValidationResult(
            is_valid=False,
            error='FILE_TOO_LARGE',
            message=f"File size {size_mb}MB exceeds maximum allowed size of {max_size / (1024 * 1024):g}MB",
            details={"fileSize": file_size, "maxSize": max_size},
        )
    return ValidationResult(is_valid=True, message='File size is within limits')


def validate_workflow_bytes(
    raw: bytes,
    max_size: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> tuple[ValidationResult, Any]:
    """
    Validate an uploaded workflow file.

    Returns (validation_result, decoded_json). decoded_json is None when the
    file is too large or not valid JSON.
    """
    size_check = validate_file_size(len(raw), max_size)
    if not size_check.is_valid:
        return size_check, None

    try:
        data = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return ValidationResult(
            is_valid=False,
            error='INVALID_JSON',
            message='File is not valid JSON',
            details={"reason": str(e)},
        ), None

    return validate_workflow(data), data
