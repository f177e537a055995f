# Overview: Flask API routes for voiding entries, undo and the activity log.

from dataclasses import asdict

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_tenant
from ..services import reporting_service, void_service


ledger_bp = Blueprint("ledger", __name__, url_prefix="/api/ledger")


@ledger_bp.post("/void")
@require_tenant
@handle_service_errors
def void_entry():
    """
    Request body:
    {
        "entry_id": str,
        "entry_type": "SALE" | "PAYMENT",
        "store_id": str,
        "amount_cents": int  (optional, must match the record),
        "items": [...]  (optional, sales only, must match the record)
    }

    Returns:
        200: entry voided
        409: entry missing or already voided
    """
    data = request.get_json(silent=True) or {}
    missing = [k for k in ("entry_id", "entry_type", "store_id") if not data.get(k)]
    if missing:
        return jsonify({"error": f"Missing required fields: {', '.join(missing)}"}), 400

    result = void_service.void_entry(
        entry_id=data["entry_id"],
        entry_type=data["entry_type"],
        store_id=data["store_id"],
        tenant_id=g.tenant_id,
        amount_cents=data.get("amount_cents"),
        items=data.get("items"),
    )
    return jsonify(asdict(result)), 200


@ledger_bp.post("/undo")
@require_tenant
@handle_service_errors
def undo_last_action():
    result = void_service.undo_last_action(g.tenant_id)
    return jsonify(asdict(result)), 200


@ledger_bp.get("/activity")
@require_tenant
@handle_service_errors
def list_activity():
    include_voided = request.args.get("include_voided", "false").lower() == "true"
    limit = request.args.get("limit", 50, type=int)
    entries = reporting_service.list_activity(g.tenant_id, include_voided=include_voided, limit=limit)
    return jsonify([entry.to_dict() for entry in entries]), 200
