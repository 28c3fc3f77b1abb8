# Overview: Flask API routes for the daily cash wallet; parses input and returns JSON responses.

from flask import Blueprint, request

from .. import actions
from ..services import wallet_service
from ..validation import ValidationError, parse_amount_cents
from ._responses import action_response, bad_request

wallet_bp = Blueprint("wallet", __name__, url_prefix="/api/wallet")


@wallet_bp.get("")
def wallet_history_route():
    limit = request.args.get("limit", type=int)
    history = wallet_service.list_wallet_history(limit=limit)
    open_day = wallet_service.get_open_day()
    return {
        "open_day": open_day.to_dict() if open_day else None,
        "items": [e.to_dict() for e in history],
        "count": len(history),
    }, 200


@wallet_bp.post("/start")
def start_day_route():
    """Body: {starting_cash_cents, date?: "YYYY-MM-DD"} (date defaults to today)."""
    data = request.get_json(silent=True) or {}
    try:
        starting = parse_amount_cents(data.get("starting_cash_cents"), key="starting_cash_cents", allow_zero=True)
    except ValidationError as e:
        return bad_request(str(e))
    return action_response(actions.start_day(starting, data.get("date")), 201)


@wallet_bp.post("/<entry_id>/close")
def close_day_route(entry_id: str):
    """Body: {ending_cash_cents}"""
    data = request.get_json(silent=True) or {}
    try:
        ending = parse_amount_cents(data.get("ending_cash_cents"), key="ending_cash_cents", allow_zero=True)
    except ValidationError as e:
        return bad_request(str(e))
    return action_response(actions.close_day(entry_id, ending))
