# Overview: Flask API routes for store payments.

from dataclasses import asdict

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_tenant
from ..services import payment_service


payments_bp = Blueprint("payments", __name__, url_prefix="/api/stores/<store_id>/payments")


@payments_bp.post("")
@require_tenant
@handle_service_errors
def record_payment(store_id: str):
    """
    Request body:
    {
        "amount_cents": int  (> 0),
        "note": str  (optional)
    }
    """
    data = request.get_json(silent=True) or {}
    if "amount_cents" not in data:
        return jsonify({"error": "amount_cents required"}), 400

    result = payment_service.record_payment(
        store_id=store_id,
        amount_cents=data["amount_cents"],
        tenant_id=g.tenant_id,
        note=data.get("note"),
    )
    return jsonify(asdict(result)), 201
