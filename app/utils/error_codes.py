# app/utils/error_codes.py

ERROR_CODES = {
    "VALIDATION_ERROR": "VALIDATION_ERROR",
    "UNAUTHORIZED": "UNAUTHORIZED",
    "FORBIDDEN": "FORBIDDEN",
    "NOT_FOUND": "NOT_FOUND",
    "SERVER_ERROR": "SERVER_ERROR",
    "SERVICE_UNAVAILABLE": "SERVICE_UNAVAILABLE",
}

HTTP_STATUS_TO_ERROR_CODE = {
    400: ERROR_CODES["VALIDATION_ERROR"],
    401: ERROR_CODES["UNAUTHORIZED"],
    403: ERROR_CODES["FORBIDDEN"],
    404: ERROR_CODES["NOT_FOUND"],
    422: ERROR_CODES["VALIDATION_ERROR"],
    500: ERROR_CODES["SERVER_ERROR"],
    503: ERROR_CODES["SERVICE_UNAVAILABLE"],
}
