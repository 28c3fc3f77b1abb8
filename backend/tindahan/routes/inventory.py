# Overview: Flask API routes for inventory items; parses input and returns JSON responses.

from flask import Blueprint, request

from .. import actions
from ..models import InventoryItem
from ..services import inventory_service
from ..errors import ItemNotFoundError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_inventory_item,
    ValidationError,
)
from ._responses import action_response, bad_request

INVENTORY_ITEM_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "cost_cents", "stock"},
    required_on_create={"name", "price_cents"},
)

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
def list_items_route():
    """
    List inventory items ordered by name.

    Query params:
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default 20, max 100)
    """
    page = request.args.get("page", type=int)
    per_page = request.args.get("per_page", type=int)
    return inventory_service.list_items(page=page, per_page=per_page)


@inventory_bp.get("/<item_id>")
def get_item_route(item_id: str):
    try:
        item = inventory_service.get_item(item_id)
    except ItemNotFoundError as e:
        return {"success": False, "message": str(e), "error": "ItemNotFoundError"}, 404
    return {"item": item.to_dict()}, 200


@inventory_bp.post("")
def create_item_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=InventoryItem, payload=payload, policy=INVENTORY_ITEM_POLICY, partial=False)
        enforce_rules_inventory_item(patch)
    except ValidationError as e:
        return bad_request(str(e))

    return action_response(actions.add_inventory_item(patch), 201)


@inventory_bp.put("/<item_id>")
def update_item_route(item_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=InventoryItem, payload=payload, policy=INVENTORY_ITEM_POLICY, partial=True)
        enforce_rules_inventory_item(patch)
    except ValidationError as e:
        return bad_request(str(e))

    return action_response(actions.update_inventory_item(item_id, patch))


@inventory_bp.delete("/<item_id>")
def delete_item_route(item_id: str):
    return action_response(actions.delete_inventory_item(item_id))
