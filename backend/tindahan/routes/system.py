# backend/tindahan/routes/system.py
"""
System health endpoint.

Reports database connectivity for deployment debugging.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import InventoryItem, SaleTransaction, Customer

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        item_count = db.session.query(InventoryItem).count()
        sale_count = db.session.query(SaleTransaction).count()
        customer_count = db.session.query(Customer).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "inventory_items": item_count,
                "sales": sale_count,
                "customers": customer_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return {"status": database["status"], "database": database}, status_code
