# Overview: Flask API routes for deliveries and stock counts.

from dataclasses import asdict

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_tenant
from ..services import count_service, inventory_service
from ..validation import ValidationError


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/stores/<store_id>")


@inventory_bp.post("/deliveries")
@require_tenant
@handle_service_errors
def record_delivery(store_id: str):
    """
    Request body:
    {
        "product_id": str,
        "quantity": int  (>= 0)
    }
    """
    data = request.get_json(silent=True) or {}
    if not data.get("product_id") or "quantity" not in data:
        return jsonify({"error": "product_id and quantity required"}), 400

    result = inventory_service.record_delivery(
        store_id=store_id,
        product_id=data["product_id"],
        quantity=data["quantity"],
        tenant_id=g.tenant_id,
    )
    return jsonify(asdict(result)), 201


@inventory_bp.post("/counts")
@require_tenant
@handle_service_errors
def record_stock_count(store_id: str):
    """
    Request body:
    {
        "counts": [{"product_id": str, "quantity": int}, ...]
    }

    Returns:
        201: count recorded (sales_record_id is null when nothing sold)
        400: invalid input, or a count exceeds tracked stock
    """
    data = request.get_json(silent=True) or {}
    counts = data.get("counts")
    if not isinstance(counts, list):
        raise ValidationError("counts must be a list")

    result = count_service.record_stock_count(
        store_id=store_id,
        counts=counts,
        tenant_id=g.tenant_id,
    )
    return jsonify(asdict(result)), 201
