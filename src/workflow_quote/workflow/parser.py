"""
Normalizes an n8n workflow export into the flat node list the pricing
engine consumes.
"""
import hashlib
import json
import random
import string
import time
from dataclasses import dataclass, field, asdict
from typing import Any

DEFAULT_WORKFLOW_NAME = 'Unnamed Workflow'
EMPTY_PARAMS_HASH = '0' * 32


@dataclass
class StructuredNode:
    """One workflow step reduced to what pricing needs."""
    node_id: str
    node_type: str
    short_label: str
    params_hash: str
    estimated_units: int = 1


@dataclass
class StructuredWorkflow:
    """Parsed workflow: nodes plus summary metadata."""
    nodes: list[StructuredNode] = field(default_factory=list)
    workflow_name: str = DEFAULT_WORKFLOW_NAME

    @property
    def metadata(self) -> dict:
        return {"total_nodes": len(self.nodes), "workflow_name": self.workflow_name}

    def to_dict(self) -> dict:
        return {
            "nodes": [asdict(n) for n in self.nodes],
            "metadata": self.metadata,
        }


def get_node_base_type(full_type: Any) -> str:
    """'n8n-nodes-base.httpRequest' → 'httpRequest'."""
    if not full_type:
        return 'unknown'
    full_type = str(full_type)
    return full_type.split('.')[-1] or full_type


def generate_node_id() -> str:
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"generated_{int(time.time() * 1000)}_{suffix}"


def create_params_hash(params: Any) -> str:
    """MD5 of the parameters with keys sorted at every level."""
    try:
        serialized = json.dumps(params, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
    except (TypeError, ValueError):
        return EMPTY_PARAMS_HASH
    return hashlib.md5(serialized.encode('utf-8')).hexdigest()


def parse_n8n_to_structured(workflow: Any) -> StructuredWorkflow:
    """Parse a decoded n8n workflow into a StructuredWorkflow."""
    if not isinstance(workflow, dict):
        return StructuredWorkflow()

    nodes = workflow.get('nodes') or []
    if not isinstance(nodes, list):
        nodes = []

    structured = []
    for node in nodes:
        if not isinstance(node, dict):
            continue
        node_type = get_node_base_type(node.get('type'))
        structured.append(StructuredNode(
            node_id=str(node.get('id') or generate_node_id()),
            node_type=node_type,
            short_label=node.get('name') or f"Unnamed {node_type} Node",
            params_hash=create_params_hash(node.get('parameters') or {}),
        ))

    return StructuredWorkflow(
        nodes=structured,
        workflow_name=workflow.get('name') or DEFAULT_WORKFLOW_NAME,
    )
