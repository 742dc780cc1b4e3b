import logging
from typing import Any, Awaitable, Dict, Tuple, Type

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ValidationError

from ..errors import ConfigurationError, QrisError
from ..providers.base import Gateway
from ..providers.bni.schemas import BniCheckStatusTransactionRequest, BniGenerateQRCodeRequest
from ..providers.bri.schemas import (
    BriMpmDynamicCheckStatusTransactionRequest,
    BriMpmDynamicGenerateQRCodeRequest,
)
from ..providers.registry import get_provider_by_name
from ..schemas.common import ResponseMap

logger = logging.getLogger(__name__)

router = APIRouter()

# provider.name -> (generate request, status request)
_request_models: Dict[str, Tuple[Type[BaseModel], Type[BaseModel]]] = {
    "BNI": (BniGenerateQRCodeRequest, BniCheckStatusTransactionRequest),
    "BRI_MPM_DYNAMIC": (BriMpmDynamicGenerateQRCodeRequest, BriMpmDynamicCheckStatusTransactionRequest),
}


def _select_provider(name: str) -> Gateway:
    provider = get_provider_by_name(name)
    if not provider or provider.name not in _request_models:
        raise HTTPException(status_code=400, detail=f"Unknown provider {name}")
    return provider


def _build_request(model: Type[BaseModel], body: Dict[str, Any]) -> Any:
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))


async def _call(provider: Gateway, op: Awaitable[ResponseMap]) -> ResponseMap:
    try:
        return await op
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=e.detail)
    except QrisError as e:
        logger.error("%s call failed: %s", provider.name, e, extra={"provider": provider.name})
        raise HTTPException(status_code=502, detail=e.detail)


@router.post("/qr/{provider_name}/generate")
async def generate(provider_name: str, body: Dict[str, Any]):
    """
    Body: fields of the bank-specific request (BNI: request_id, amount, qr_expired;
    BRI: partner_reference_no, amount, currency).
    Returns the raw bank answer plus what the status check needs:
    {
      "provider": "BNI",
      "successful": true,
      "reference_number": "C000011957",
      "service_code": "",
      "provider_response_data": {...}
    }
    """
    provider = _select_provider(provider_name)
    request = _build_request(_request_models[provider.name][0], body)

    res = await _call(provider, provider.generate_qr_code(request))
    return {
        "provider": provider.name,
        "successful": res.is_generation_successful(),
        "reference_number": res.reference_number(),
        "service_code": res.service_code(),
        "provider_response_data": res,
    }


@router.post("/qr/{provider_name}/status")
async def status(provider_name: str, body: Dict[str, Any]):
    provider = _select_provider(provider_name)
    request = _build_request(_request_models[provider.name][1], body)

    res = await _call(provider, provider.check_status_transaction(request))
    return {
        "provider": provider.name,
        "successful": res.is_generation_successful(),
        "paid": res.is_payment_successful(),
        "provider_response_data": res,
    }
