# app/models/enums.py
import enum


class CurrencyCode(enum.Enum):
    EUR = "EUR"
    USD = "USD"
    GBP = "GBP"
    JPY = "JPY"
    CNY = "CNY"


class SymbolPosition(enum.Enum):
    before = "before"
    after = "after"


class FailureReason(enum.Enum):
    backend_error = "backend_error"
    missing_record = "missing_record"
    malformed_record = "malformed_record"
    unknown_code = "unknown_code"
    invalid_code = "invalid_code"
