from fastapi import APIRouter, Request, Depends
from fastapi.responses import JSONResponse

from app.services.currency_store import CurrencyStore, get_currency_store
from app.utils.auth import get_current_claims
from app.utils.helpers import success_response, error_response, currency_options, settings_payload
from app.utils.error_codes import ERROR_CODES

router = APIRouter(dependencies=[Depends(get_current_claims)])


async def read_json_body(request: Request):
    """Parsed JSON body, or None when the body is not valid JSON."""
    try:
        return await request.json()
    except ValueError:
        return None


@router.get("")
def get_currency_settings(store: CurrencyStore = Depends(get_currency_store)):
    return success_response(data=settings_payload(store.get_active_settings(), store.is_loading))


@router.get("/options")
def get_currency_options(store: CurrencyStore = Depends(get_currency_store)):
    return success_response(data=currency_options(store.get_active_settings()))


@router.put("")
async def update_currency_settings(request: Request, store: CurrencyStore = Depends(get_currency_store)):
    body = await read_json_body(request)
    code = body.get("code") if isinstance(body, dict) else None

    if not isinstance(code, str) or not code:
        return JSONResponse(
            status_code=400,
            content=error_response(ERROR_CODES["VALIDATION_ERROR"], "A currency code is required")
        )

    updated = await store.update_currency(code.upper())
    data = settings_payload(store.get_active_settings(), store.is_loading)
    data["updated"] = updated

    if not updated:
        return success_response(data=data, message="Currency settings unchanged")
    return success_response(data=data, message="Currency settings updated successfully")


@router.post("/format")
async def format_amounts(request: Request, store: CurrencyStore = Depends(get_currency_store)):
    body = await read_json_body(request)
    if not isinstance(body, dict) or ("amount" not in body and "amounts" not in body):
        return JSONResponse(
            status_code=400,
            content=error_response(ERROR_CODES["VALIDATION_ERROR"], "Send an 'amount' or a list of 'amounts'")
        )

    settings = store.get_active_settings()
    data = {"code": settings.code.value}

    if "amount" in body:
        data["formatted"] = store.format_currency(body["amount"])

    if "amounts" in body:
        amounts = body["amounts"]
        if not isinstance(amounts, list):
            return JSONResponse(
                status_code=400,
                content=error_response(ERROR_CODES["VALIDATION_ERROR"], "'amounts' must be a list")
            )
        data["formatted_amounts"] = [store.format_currency(amount) for amount in amounts]

    return success_response(data=data)


@router.post("/reload")
async def reload_currency_settings(store: CurrencyStore = Depends(get_currency_store)):
    await store.load_preference()
    return success_response(
        data=settings_payload(store.get_active_settings(), store.is_loading),
        message="Currency settings reloaded"
    )
