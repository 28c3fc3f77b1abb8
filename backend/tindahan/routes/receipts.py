# Overview: Flask API routes for expense receipts; parses input and returns JSON responses.

from flask import Blueprint, request

from .. import actions
from ..services import receipt_service
from ._responses import action_response

receipts_bp = Blueprint("receipts", __name__, url_prefix="/api/receipts")


@receipts_bp.get("")
def list_receipts_route():
    date = request.args.get("date")
    limit = request.args.get("limit", type=int)
    try:
        receipts = receipt_service.list_receipts(transaction_date=date, limit=limit)
    except ValueError:
        return {"success": False, "message": "date must be YYYY-MM-DD", "error": "ValidationError"}, 400
    return {"items": [r.to_dict() for r in receipts], "count": len(receipts)}, 200


@receipts_bp.post("")
def save_receipt_route():
    """
    Body: {merchant_name, transaction_date, category, total_cents,
           payment_source: "Cash on Hand" | "G-Cash",
           items?: [{name, price_cents}], other_category_description?}
    """
    data = request.get_json(silent=True) or {}
    return action_response(actions.save_receipt(data), 201)
