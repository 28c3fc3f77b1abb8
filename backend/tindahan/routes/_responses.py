# Overview: Shared helpers turning action results into Flask JSON responses.

from __future__ import annotations

ERROR_STATUS = {
    "NotFoundError": 404,
    "ItemNotFoundError": 404,
    "AlreadyVoidedError": 409,
    "AlreadyDeletedError": 409,
    "AlreadyOpenError": 409,
    "AlreadyClosedError": 409,
    "DayClosedError": 409,
    "InsufficientStockError": 409,
    "OutstandingBalanceError": 409,
    "TransactionAbortedError": 503,
    "InternalError": 500,
}


def action_response(result: dict, success_status: int = 200):
    """Map an action result to (body, status). Unlisted errors are input problems (400)."""
    if result.get("success"):
        return result, success_status
    return result, ERROR_STATUS.get(result.get("error"), 400)


def bad_request(message: str):
    return {"success": False, "message": message, "error": "ValidationError"}, 400
