# app/utils/helpers.py
from app.utils.currency import CURRENCY_LABELS, CURRENCY_PRESETS, CurrencySettings


def success_response(data=None, message="Operation successful"):
    return {"success": True, "data": data, "message": message}


def error_response(code, message, details=None):
    return {"success": False, "error": {"code": code, "message": message, "details": details}}


def currency_options(active: CurrencySettings):
    """Entries for the currency picker, in display order."""
    return [
        {
            "code": code.value,
            "label": label,
            "symbol": CURRENCY_PRESETS[code].symbol,
            "active": code == active.code,
        }
        for code, label in CURRENCY_LABELS.items()
    ]


def settings_payload(settings: CurrencySettings, is_loading: bool):
    return {**settings.to_dict(), "is_loading": is_loading}
