# Overview: Flask API routes for dashboard and period reports.

from flask import Blueprint, g, jsonify, request

from ..decorators import handle_service_errors, require_tenant
from ..services import reporting_service
from ..services.reporting_service import ReportError
from ..time_utils import month_range, parse_iso_datetime


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/dashboard")
@require_tenant
@handle_service_errors
def dashboard():
    return jsonify(reporting_service.dashboard_summary(g.tenant_id)), 200


@reports_bp.get("/summary")
@require_tenant
@handle_service_errors
def summary():
    """
    Query params: either range=this-month|last-month, or start/end ISO-8601.
    Defaults to this-month.
    """
    start_raw = request.args.get("start")
    end_raw = request.args.get("end")
    try:
        if start_raw or end_raw:
            start = parse_iso_datetime(start_raw)
            end = parse_iso_datetime(end_raw)
            if start is None or end is None:
                raise ReportError("start and end are both required")
        else:
            start, end = month_range(request.args.get("range", "this-month"))
    except ValueError as exc:
        raise ReportError(str(exc))

    return jsonify(reporting_service.period_summary(g.tenant_id, start, end)), 200
