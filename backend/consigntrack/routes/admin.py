# Overview: Flask API routes for administrative operations (tenant reset, user whitelist).

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_admin, require_tenant
from ..services import maintenance_service, user_service


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.post("/reset")
@require_tenant
@require_admin
@handle_service_errors
def reset_tenant_data():
    """Delete every store, product and ledger row of the caller's tenant."""
    deleted = maintenance_service.reset_tenant_data(g.tenant_id)
    return jsonify({"status": "ok", "deleted": deleted}), 200


@admin_bp.get("/users")
@require_tenant
@require_admin
@handle_service_errors
def list_users():
    return jsonify([u.to_dict() for u in user_service.list_users()]), 200


@admin_bp.post("/users")
@require_tenant
@require_admin
@handle_service_errors
def whitelist_user():
    data = request.get_json(silent=True) or {}
    user = user_service.whitelist_user(
        uid=data.get("uid"),
        email=data.get("email"),
        role=data.get("role"),
    )
    return jsonify(user.to_dict()), 201
