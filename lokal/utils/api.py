# --- lokal/utils/api.py ---
from datetime import datetime, timezone


def utc_iso():
    return datetime.now(timezone.utc).isoformat()


def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME": utc_iso(),
        }
    }


def api_error(message, data=None):
    return {
        "status": False,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME": utc_iso(),
        }
    }
