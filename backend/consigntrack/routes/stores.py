# Overview: Flask API routes for stores, balances, pricing and history.

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_tenant
from ..services import balance_service, pricing_service, reporting_service, store_service


stores_bp = Blueprint("stores", __name__, url_prefix="/api/stores")


@stores_bp.get("")
@require_tenant
@handle_service_errors
def list_stores():
    active_only = request.args.get("active_only", "false").lower() == "true"
    stores = store_service.list_stores(g.tenant_id, active_only=active_only)
    return jsonify([store.to_dict() for store in stores]), 200


@stores_bp.post("")
@require_tenant
@handle_service_errors
def create_store():
    data = request.get_json(silent=True) or {}
    store = store_service.create_store(
        name=data.get("name"),
        tenant_id=g.tenant_id,
        phone=data.get("phone"),
        location=data.get("location"),
        notes=data.get("notes"),
    )
    return jsonify(store.to_dict()), 201


@stores_bp.get("/<store_id>")
@require_tenant
@handle_service_errors
def get_store(store_id: str):
    store = store_service.get_store(store_id, g.tenant_id)
    return jsonify(store.to_dict()), 200


@stores_bp.patch("/<store_id>")
@require_tenant
@handle_service_errors
def update_store(store_id: str):
    data = request.get_json(silent=True) or {}
    store = store_service.update_store(store_id, data, g.tenant_id)
    return jsonify(store.to_dict()), 200


@stores_bp.get("/<store_id>/balance")
@require_tenant
@handle_service_errors
def get_balance(store_id: str):
    return jsonify(balance_service.get_store_balance(store_id, g.tenant_id)), 200


@stores_bp.get("/<store_id>/history")
@require_tenant
@handle_service_errors
def get_history(store_id: str):
    limit = request.args.get("limit", 100, type=int)
    return jsonify(reporting_service.store_history(store_id, g.tenant_id, limit=limit)), 200


@stores_bp.get("/<store_id>/pricing")
@require_tenant
@handle_service_errors
def list_pricing(store_id: str):
    rows = pricing_service.get_store_pricing(store_id, g.tenant_id)
    return jsonify([row.to_dict() for row in rows]), 200


@stores_bp.put("/<store_id>/pricing/<product_id>")
@require_tenant
@handle_service_errors
def set_pricing(store_id: str, product_id: str):
    data = request.get_json(silent=True) or {}
    row = pricing_service.set_store_pricing(store_id, product_id, data.get("price_cents"), g.tenant_id)
    return jsonify(row.to_dict()), 200


@stores_bp.delete("/<store_id>/pricing/<product_id>")
@require_tenant
@handle_service_errors
def clear_pricing(store_id: str, product_id: str):
    removed = pricing_service.clear_store_pricing(store_id, product_id, g.tenant_id)
    if not removed:
        return jsonify({"error": "No price override for this product"}), 404
    return "", 204
