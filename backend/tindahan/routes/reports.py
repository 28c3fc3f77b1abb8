# Overview: Flask API routes for dashboard reports; parses input and returns JSON responses.

"""
Report Routes

Best sellers and the sales-vs-expenses performance chart.
"""

from flask import Blueprint, request

from ..services import reporting_service
from ..services.reporting_service import ReportError
from ._responses import bad_request

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/best-sellers")
def best_sellers_route():
    """Query params: limit (default 5)."""
    limit = request.args.get("limit", default=5, type=int)
    try:
        items = reporting_service.best_sellers(limit=limit)
    except ReportError as e:
        return bad_request(str(e))
    return {"items": items, "count": len(items)}, 200


@reports_bp.get("/performance")
def performance_route():
    """Query params: period = day | month | year (default day)."""
    try:
        return reporting_service.performance(period=request.args.get("period", "day")), 200
    except ReportError as e:
        return bad_request(str(e))
