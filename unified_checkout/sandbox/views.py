import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from unified_checkout import config
from unified_checkout.utils.rate_limit import optional_rate_limit
from . import service
from .models import CaptureContextRequest, ChargeRequest

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/unified-checkout", tags=["Unified Checkout (sandbox)"])

# module unified_checkout.sandbox.views
@router.post("/capture-context", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_capture_context(body: CaptureContextRequest):
    """
    Émet un capture context signé pour une tentative de paiement.
    - Entrée JSON: {allowedCardNetworks, allowedPaymentTypes, amount, currency, country, locale,
      clientVersion, targetOrigins}
    - Sécurité: rate limit (10 req / 60s)
    - Erreurs: 422 {"message": "invalid amount"}, 400 si targetOrigins incohérent
    """
    return JSONResponse(service.create_capture_context(body))

@router.post("/charge")
async def charge(body: ChargeRequest):
    """
    Règle un transient token.
    - Réponse: objet de règlement opaque {id, status, amount, currency}
    - Erreurs: 402 {"message": "Card declined"}, 422 si montant invalide
    """
    return JSONResponse(service.charge(body))

@router.get("/config")
def get_checkout_config(request: Request) -> Dict[str, Any]:
    """
    Configuration affichée par la page marchande (URL backend, origine courante, défauts).
    """
    return {
        "backendUrl": config.API_BASE_URL,
        "currentOrigin": request.headers.get("origin"),
        "clientVersion": config.CLIENT_VERSION,
        "defaults": {
            "amount": config.DEFAULT_AMOUNT,
            "currency": config.DEFAULT_CURRENCY,
            "country": config.DEFAULT_COUNTRY,
            "locale": config.DEFAULT_LOCALE,
        },
        "supportedCurrencies": config.SUPPORTED_CURRENCIES,
        "allowedCardNetworks": config.ALLOWED_CARD_NETWORKS,
        "allowedPaymentTypes": config.ALLOWED_PAYMENT_TYPES,
    }
