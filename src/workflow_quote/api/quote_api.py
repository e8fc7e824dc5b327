"""
Quote API - FastAPI router for workflow validation, parsing and pricing.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from . import state
from ..services.payload_builder import build_compact_payload
from ..services.price_list import generate_price_list
from ..services.quote_validator import parse_json_string, validate_llm_quote
from ..workflow.parser import parse_n8n_to_structured
from ..workflow.validator import ValidationResult, validate_workflow_bytes

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/n8n-quote", tags=["n8n-quote"])


# Pydantic models for API
class CalculateRequest(BaseModel):
    """Request model for pricing a single node."""
    node_type: str
    modifiers: dict[str, Any] = {}


class LlmResponseRequest(BaseModel):
    """Request model for validating an LLM quote."""
    llm_response: Any = None
    compact_payload: Any = None


class ReviewQueueRequest(BaseModel):
    """Request model for queueing a quote for review."""
    quote: Optional[dict] = None
    reasons: Optional[list[str]] = None
    original_request: Optional[dict] = None
    customer_email: Optional[str] = None


class ReviewDecision(BaseModel):
    """Request model for approving or rejecting a review."""
    queue_id: Optional[str] = None
    reviewer_email: Optional[str] = None
    notes: Optional[str] = None


def _error(status_code: int, error: str, message: str, reason: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": error, "message": message, "details": {"reason": reason}},
    )


def _internal_error(action: str, exc: Exception) -> HTTPException:
    logger.exception("Unexpected error during %s", action)
    return _error(500, "INTERNAL_ERROR", f"An unexpected error occurred during {action}", str(exc))


async def _read_upload(workflow: Optional[UploadFile]) -> tuple[ValidationResult, Any]:
    """Read and validate an uploaded workflow; raises 400 when it is invalid."""
    if workflow is None:
        raise _error(400, "NO_FILE_UPLOADED", "No file was uploaded", "File is required")

    filename = workflow.filename or ""
    if workflow.content_type != "application/json" and not filename.endswith(".json"):
        raise _error(400, "INVALID_FILE_TYPE", "Only JSON files are allowed", f"Rejected {filename or 'upload'}")

    raw = await workflow.read()
    validation, data = validate_workflow_bytes(raw, state.settings.max_upload_bytes)
    if not validation.is_valid:
        raise HTTPException(status_code=400, detail=validation.to_dict())
    return validation, data


async def _read_workflow(workflow: Optional[UploadFile]) -> Any:
    _, data = await _read_upload(workflow)
    return data


# Endpoints

@router.post("/validate")
async def validate(workflow: Optional[UploadFile] = File(None)):
    """Validate an uploaded n8n workflow file."""
    validation, _ = await _read_upload(workflow)

    response = {"success": True, "message": validation.message}
    if validation.warning:
        response["warning"] = validation.warning
    return response


@router.post("/parse")
async def parse(workflow: Optional[UploadFile] = File(None)):
    """Parse an uploaded workflow into its structured node list."""
    data = await _read_workflow(workflow)
    try:
        structured = parse_n8n_to_structured(data)
        return {"success": True, "data": structured.to_dict()}
    except Exception as e:
        raise _internal_error("parsing", e)


@router.post("/price-list")
async def price_list(workflow: Optional[UploadFile] = File(None)):
    """Generate a price list for an uploaded workflow."""
    data = await _read_workflow(workflow)
    try:
        structured = parse_n8n_to_structured(data)
        result = generate_price_list(structured, state.engine)
        return {"success": True, "data": result.to_dict()}
    except Exception as e:
        raise _internal_error("price list generation", e)


@router.post("/compact-payload")
async def compact_payload(
    workflow: Optional[UploadFile] = File(None),
    customer_text: str = Form(""),
    business_rules: str = Form("{}"),
):
    """Build the compact LLM payload for an uploaded workflow."""
    data = await _read_workflow(workflow)

    ok, rules = parse_json_string(business_rules or "{}")
    if not ok or not isinstance(rules, dict):
        raise _error(400, "INVALID_BUSINESS_RULES", "business_rules must be a JSON object", str(rules))

    try:
        structured = parse_n8n_to_structured(data)
        result = generate_price_list(structured, state.engine)
        return {"success": True, "data": build_compact_payload(result, customer_text, rules)}
    except Exception as e:
        raise _internal_error("compact payload generation", e)


@router.post("/calculate")
async def calculate(req: CalculateRequest):
    """Price a single node. Unknown node types come back with success=false."""
    return state.engine.calculate_price_for_node(req.node_type, req.modifiers).to_dict()


@router.get("/node-types")
async def node_types():
    """List the node types in the price table."""
    return {"success": True, "node_types": state.engine.get_available_node_types()}


@router.get("/node-types/{node_type}")
async def node_type_pricing(node_type: str):
    """Get the pricing entry for one node type."""
    pricing = state.engine.get_pricing_for_node_type(node_type)
    if pricing is None:
        raise _error(404, "NODE_TYPE_NOT_FOUND", f"Node type '{node_type}' not found", "Not in pricing database")
    return {"success": True, "node_type": node_type, "pricing": pricing.to_dict()}


@router.get("/global-modifiers")
async def global_modifiers():
    """Get the global modifiers table."""
    return {"success": True, "global_modifiers": state.engine.get_global_modifiers()}


@router.post("/validate-llm-response")
async def validate_llm_response(req: LlmResponseRequest):
    """Validate an LLM-proposed quote against its compact payload."""
    return validate_llm_quote(req.llm_response, req.compact_payload, state.engine).to_dict()


@router.post("/add-to-review-queue")
async def add_to_review_queue(req: ReviewQueueRequest):
    """Queue a quote for human review."""
    if not req.quote or not req.reasons:
        raise _error(400, "MISSING_DATA", "Quote and reasons are required",
                     "Quote and reasons are required for review queue")
    try:
        queue_id = state.review_queue.add(req.quote, req.reasons, req.original_request, req.customer_email)
    except OSError as e:
        raise _internal_error("adding to review queue", e)
    return {"success": True, "queue_id": queue_id}


@router.get("/pending-reviews")
async def pending_reviews():
    """List reviews awaiting a decision."""
    return {"success": True, "reviews": [r.__dict__ for r in state.review_queue.list_pending()]}


@router.get("/all-reviews")
async def all_reviews():
    """List every review."""
    return {"success": True, "reviews": [r.__dict__ for r in state.review_queue.list_all()]}


@router.get("/reviews/stats")
async def review_stats():
    """Review counts by status."""
    return state.review_queue.get_stats()


def _decide(req: ReviewDecision, approve: bool) -> dict:
    verb = "approval" if approve else "rejection"
    if not req.queue_id or not req.reviewer_email:
        raise _error(400, "MISSING_DATA", "Queue ID and reviewer email are required",
                     f"Queue ID and reviewer email are required for {verb}")

    decide = state.review_queue.approve if approve else state.review_queue.reject
    try:
        found = decide(req.queue_id, req.reviewer_email, req.notes)
    except OSError as e:
        raise _internal_error(f"review {verb}", e)

    if not found:
        raise _error(404, "NOT_FOUND", "Review not found", "Review with specified queue ID not found")
    return {"success": True, "message": f"Review {'approved' if approve else 'rejected'} successfully"}


@router.post("/approve-review")
async def approve_review(req: ReviewDecision):
    """Approve a queued quote."""
    return _decide(req, approve=True)


@router.post("/reject-review")
async def reject_review(req: ReviewDecision):
    """Reject a queued quote."""
    return _decide(req, approve=False)
