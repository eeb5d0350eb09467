"""
Cas d'usage du backend sandbox: émission de capture contexts et règlement simulé.
Aucune persistance: un règlement n'est pas historisé.
"""
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional
from uuid import uuid4

import jwt
from fastapi import HTTPException

from unified_checkout import config
from .models import CaptureContextRequest, ChargeRequest

logger = logging.getLogger(__name__)

DECLINED_TOKEN = "tok_declined"

# module unified_checkout.sandbox.service
def parse_amount(amount: str) -> Decimal:
    """
    Montant décimal strictement positif (ex: "10.00").
    - Soulève HTTPException(422, "invalid amount") sinon.
    """
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise HTTPException(status_code=422, detail="invalid amount")
    if not value.is_finite() or value <= 0:
        raise HTTPException(status_code=422, detail="invalid amount")
    return value

def check_currency(currency: str) -> str:
    code = (currency or "").strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise HTTPException(status_code=422, detail="invalid currency")
    return code

def check_target_origins(origins: List[str], allowed: Optional[List[str]] = None) -> List[str]:
    """
    Exactement une origine attendue (celle de la page marchande).
    - allowed vide: toute origine http(s) acceptée
    """
    allowed = config.SANDBOX_ALLOWED_ORIGINS if allowed is None else allowed
    if len(origins) != 1:
        raise HTTPException(status_code=400, detail="targetOrigins must contain exactly one origin")
    origin = origins[0].rstrip("/")
    if not origin.startswith(("http://", "https://")):
        raise HTTPException(status_code=400, detail=f"invalid target origin: {origin}")
    if allowed and origin not in allowed:
        raise HTTPException(status_code=400, detail=f"target origin not allowed: {origin}")
    return [origin]

def build_context_claims(body: CaptureContextRequest, origins: List[str], now: Optional[int] = None) -> Dict[str, Any]:
    """Claims du capture context: la librairie à charger est décrite dans ctx[0].data."""
    issued_at = int(now if now is not None else time.time())
    data: Dict[str, Any] = {
        "clientLibrary": config.SANDBOX_CLIENT_LIBRARY_URL,
        "targetOrigins": origins,
        "allowedCardNetworks": body.allowedCardNetworks,
        "allowedPaymentTypes": body.allowedPaymentTypes,
        "clientVersion": body.clientVersion,
    }
    if config.SANDBOX_CLIENT_LIBRARY_INTEGRITY:
        data["clientLibraryIntegrity"] = config.SANDBOX_CLIENT_LIBRARY_INTEGRITY
    return {
        "jti": uuid4().hex,
        "iat": issued_at,
        "exp": issued_at + config.SANDBOX_CONTEXT_TTL_SECONDS,
        "type": "gda-0.9.0",
        "ctx": [{"type": "mf-2.0.0", "data": data}],
    }

def create_capture_context(body: CaptureContextRequest) -> Dict[str, str]:
    """
    Valide la demande puis signe le capture context (HS256, secret sandbox).
    Retour: {"captureContext": "<jwt>"}
    """
    amount = parse_amount(body.amount)
    currency = check_currency(body.currency)
    origins = check_target_origins(body.targetOrigins)
    claims = build_context_claims(body, origins)
    token = jwt.encode(claims, config.SANDBOX_SIGNING_SECRET, algorithm="HS256")
    logger.info("sandbox.capture_context issued amount=%s currency=%s origin=%s", amount, currency, origins[0])
    return {"captureContext": token}

def charge(body: ChargeRequest) -> Dict[str, Any]:
    """
    Règlement simulé d'un transient token.
    - tok_declined: HTTPException(402, "Card declined")
    - sinon: {"id": "ch_<hex>", "status": "AUTHORIZED", "amount", "currency"}
    """
    amount = parse_amount(body.amount)
    currency = check_currency(body.currency)
    token = body.transientToken
    if not token:
        raise HTTPException(status_code=400, detail="transientToken manquant")
    if token == DECLINED_TOKEN:
        logger.info("sandbox.charge declined amount=%s currency=%s", amount, currency)
        raise HTTPException(status_code=402, detail="Card declined")
    charge_id = f"ch_{uuid4().hex[:24]}"
    logger.info("sandbox.charge authorized id=%s amount=%s currency=%s", charge_id, amount, currency)
    return {
        "id": charge_id,
        "status": "AUTHORIZED",
        "amount": f"{amount:.2f}",
        "currency": currency,
    }
