# Overview: Request decorators for API routes: tenant context, admin role, error mapping.

from functools import wraps

from flask import current_app, g, jsonify, request

from .extensions import db
from .services import user_service
from .services.concurrency import ConcurrencyError
from .services.reporting_service import ReportError
from .services.tenant_service import NotFoundError, TenantAccessError
from .services.void_service import PreconditionError
from .validation import ValidationError


TENANT_HEADER = "X-Tenant-Id"


def require_tenant(f):
    """
    Establish tenant context from the upstream identity provider.

    The authenticated uid arrives in the X-Tenant-Id header; it must be a
    whitelisted, active user. Sets:
    - g.current_user: the User row
    - g.tenant_id: the caller's tenant (== uid)

    SECURITY: Returns 401 without the header, 403 for unknown or inactive users.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        uid = (request.headers.get(TENANT_HEADER) or "").strip()
        if not uid:
            return jsonify({"error": "Authentication required"}), 401

        user = user_service.fetch_user(uid)
        if not user or not user.active:
            current_app.logger.warning("Rejected request for unknown or inactive user %s on %s", uid, request.path)
            return jsonify({"error": "Access denied"}), 403

        g.current_user = user
        g.tenant_id = user.id
        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require @require_tenant first; rejects non-admin users with 403."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = getattr(g, "current_user", None)
        if user is None:
            return jsonify({"error": "Authentication required"}), 401
        if user.role != user_service.ROLE_ADMIN:
            return jsonify({"error": "Admin role required"}), 403
        return f(*args, **kwargs)

    return decorated_function


ERROR_STATUS = [
    (ValidationError, 400),
    (ReportError, 400),
    (TenantAccessError, 403),
    (NotFoundError, 404),
    (PreconditionError, 409),
    (ConcurrencyError, 409),
]


def handle_service_errors(f):
    """Map service exceptions to JSON error responses; log anything unexpected."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except tuple(cls for cls, _status in ERROR_STATUS) as exc:
            db.session.rollback()
            status = next(code for cls, code in ERROR_STATUS if isinstance(exc, cls))
            body = {"error": str(exc)}
            product_id = getattr(exc, "product_id", None)
            if product_id:
                body["product_id"] = product_id
            return jsonify(body), status
        except Exception:
            db.session.rollback()
            current_app.logger.exception("Failed to handle %s %s", request.method, request.path)
            return jsonify({"error": "Internal server error"}), 500

    return decorated_function
