# Overview: Flask API routes for sales operations; parses input and returns JSON responses.

"""Sales API routes: commit, void, history and e-wallet service sales."""

from flask import Blueprint, request

from .. import actions
from ..errors import NotFoundError
from ..services import sales_service
from ..validation import ValidationError, parse_amount_cents, parse_line_items
from ._responses import action_response, bad_request

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales")


@sales_bp.post("")
def submit_sale_route():
    """
    Commit a sale.

    Body: {items: [{item_id?, item_name, quantity, unit_price_cents, total_cents?}],
           customer_name?, total_cents?}
    """
    data = request.get_json(silent=True) or {}
    try:
        items = parse_line_items(data.get("items"))
        total = data.get("total_cents")
        total = parse_amount_cents(total, key="total_cents", allow_zero=True) if total is not None else None
    except ValidationError as e:
        return bad_request(str(e))

    result = actions.submit_sale_transaction(items, data.get("customer_name"), total)
    return action_response(result, 201)


@sales_bp.get("")
def list_sales_route():
    status = request.args.get("status")
    limit = request.args.get("limit", type=int)
    sales = sales_service.list_sales(status=status, limit=limit)
    return {"items": [s.to_dict() for s in sales], "count": len(sales)}, 200


@sales_bp.get("/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return {"success": False, "message": str(e), "error": "NotFoundError"}, 404
    return {"sale": sale.to_dict()}, 200


@sales_bp.post("/<sale_id>/void")
def void_sale_route(sale_id: str):
    """Void an active sale and restore its stock."""
    return action_response(actions.void_sale_transaction(sale_id))


@sales_bp.post("/ewallet")
def ewallet_route():
    """
    Record a GCash service sale.

    Body: {kind: "cash-in" | "cash-out" | "e-load", amount_cents}
    """
    data = request.get_json(silent=True) or {}
    try:
        amount = parse_amount_cents(data.get("amount_cents"))
    except ValidationError as e:
        return bad_request(str(e))

    kind = data.get("kind")
    if kind not in sales_service.EWALLET_KINDS:
        return bad_request(f"kind must be one of: {', '.join(sales_service.EWALLET_KINDS)}")

    return action_response(actions.submit_ewallet_transaction(kind, amount), 201)
