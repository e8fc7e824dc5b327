"""Workflow subpackage - n8n workflow validation and parsing."""
from .parser import StructuredNode, StructuredWorkflow, parse_n8n_to_structured
from .validator import ValidationResult, validate_file_size, validate_workflow, validate_workflow_bytes

__all__ = [
    'StructuredNode', 'StructuredWorkflow', 'parse_n8n_to_structured',
    'ValidationResult', 'validate_file_size', 'validate_workflow', 'validate_workflow_bytes',
]
