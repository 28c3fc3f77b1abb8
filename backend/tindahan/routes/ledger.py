# Overview: Flask API routes for customers and their credit ledger; parses input and returns JSON responses.

"""
Customer credit ledger routes.

- /api/customers: list, create, summary, rename, delete (zero balance only)
- /api/customers/<id>/transactions: list and record credits/payments
- /api/ledger/<id>: soft-delete one ledger transaction
"""

from flask import Blueprint, request

from .. import actions
from ..errors import NotFoundError
from ..services import credit_service
from ..validation import ValidationError, parse_amount_cents, parse_line_items
from ._responses import action_response, bad_request

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api")


def _not_found(e: NotFoundError):
    return {"success": False, "message": str(e), "error": "NotFoundError"}, 404


def _parse_description(data: dict) -> str | None:
    description = data.get("description")
    if description is not None and not isinstance(description, str):
        raise ValidationError("description must be a string")
    return description


@ledger_bp.get("/customers")
def list_customers_route():
    include_deleted = request.args.get("include_deleted", "false").lower() == "true"
    customers = credit_service.list_customers(include_deleted=include_deleted)
    return {"items": customers, "count": len(customers)}, 200


@ledger_bp.post("/customers")
def add_customer_route():
    """
    Body: {name, initial_amount_cents?, description?}

    A positive initial amount is recorded as an opening credit.
    """
    data = request.get_json(silent=True) or {}
    name = str(data.get("name") or "").strip()
    if not name:
        return bad_request("name is required")

    try:
        initial = data.get("initial_amount_cents")
        initial = parse_amount_cents(initial, key="initial_amount_cents", allow_zero=True) if initial is not None else 0
        description = _parse_description(data)
    except ValidationError as e:
        return bad_request(str(e))

    return action_response(actions.add_customer(name, initial, description), 201)


@ledger_bp.get("/customers/<int:customer_id>")
def customer_summary_route(customer_id: int):
    try:
        return credit_service.get_customer_summary(customer_id), 200
    except NotFoundError as e:
        return _not_found(e)


@ledger_bp.put("/customers/<int:customer_id>")
def rename_customer_route(customer_id: int):
    data = request.get_json(silent=True) or {}
    name = str(data.get("name") or "").strip()
    if not name:
        return bad_request("name is required")
    return action_response(actions.update_customer_name(customer_id, name))


@ledger_bp.delete("/customers/<int:customer_id>")
def delete_customer_route(customer_id: int):
    return action_response(actions.delete_customer(customer_id))


@ledger_bp.get("/customers/<int:customer_id>/transactions")
def list_transactions_route(customer_id: int):
    try:
        credit_service.get_customer(customer_id)
    except NotFoundError as e:
        return _not_found(e)
    txns = credit_service.list_ledger_transactions(customer_id)
    return {"items": [t.to_dict() for t in txns], "count": len(txns)}, 200


@ledger_bp.post("/customers/<int:customer_id>/transactions")
def add_transaction_route(customer_id: int):
    """
    Record a credit or a payment.

    Credit body:  {type: "credit", items: [...], description?}
    Payment body: {type: "payment", amount_cents, paid_credit_ids?: [int], description?}
    """
    data = request.get_json(silent=True) or {}
    txn_type = data.get("type")

    try:
        if txn_type == "credit":
            result = actions.add_ledger_transaction(
                customer_id,
                "credit",
                items=parse_line_items(data.get("items")),
                description=_parse_description(data),
            )
        elif txn_type == "payment":
            credit_ids = data.get("paid_credit_ids") or None
            if credit_ids is not None and (
                not isinstance(credit_ids, list)
                or not all(isinstance(c, int) and not isinstance(c, bool) for c in credit_ids)
            ):
                return bad_request("paid_credit_ids must be a list of integers")
            result = actions.add_ledger_transaction(
                customer_id,
                "payment",
                amount_cents=parse_amount_cents(data.get("amount_cents")),
                paid_credit_ids=credit_ids,
                description=_parse_description(data),
            )
        else:
            return bad_request("type must be 'credit' or 'payment'")
    except ValidationError as e:
        return bad_request(str(e))

    return action_response(result, 201)


@ledger_bp.delete("/ledger/<int:transaction_id>")
def delete_transaction_route(transaction_id: int):
    return action_response(actions.delete_ledger_transaction(transaction_id))
