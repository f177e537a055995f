# Overview: Flask API routes for the product catalog.

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_tenant
from ..services import products_service


products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_tenant
@handle_service_errors
def list_products():
    products = products_service.list_products(g.tenant_id)
    return jsonify([p.to_dict() for p in products]), 200


@products_bp.post("")
@require_tenant
@handle_service_errors
def create_product():
    data = request.get_json(silent=True) or {}
    product = products_service.create_product(
        name=data.get("name"),
        default_price_cents=data.get("default_price_cents"),
        tenant_id=g.tenant_id,
        product_id=data.get("id"),
    )
    return jsonify(product.to_dict()), 201


@products_bp.patch("/<product_id>")
@require_tenant
@handle_service_errors
def update_product(product_id: str):
    data = request.get_json(silent=True) or {}
    product = products_service.update_product(product_id, data, g.tenant_id)
    return jsonify(product.to_dict()), 200
