"""
Soumission du transient token au backend pour règlement (une seule tentative par jeton).
"""
import logging

from .backend_client import CHARGE_PATH, BackendClient, error_message
from .errors import BackendError
from .models import SettlementResult, TransientToken

logger = logging.getLogger(__name__)

# module unified_checkout.checkout.charge
class ChargeSubmitter:
    def __init__(self, backend: BackendClient):
        self._backend = backend

    async def charge(self, token: TransientToken, amount: str, currency: str) -> SettlementResult:
        """
        POST {transientToken, amount, currency}.
        - 2xx JSON (objet ou non): SettlementResult(payload), le jeton est déjà consommé
        - 2xx non JSON: BackendError("Payment failed")
        - non-2xx: BackendError(message du corps ou "Payment failed: <status>")
        - pas de retry: le jeton est à usage unique
        """
        status, body = await self._backend.post_json(
            CHARGE_PATH,
            {"transientToken": token, "amount": amount, "currency": currency},
            network_message="Payment failed",
        )
        if not 200 <= status < 300:
            raise BackendError(error_message(body, f"Payment failed: {status}"), status=status)
        if body is None:
            raise BackendError("Payment failed", status=status)
        charge_id = body.get("id") if isinstance(body, dict) else None
        logger.info("checkout.charge settled amount=%s currency=%s id=%s", amount, currency, charge_id)
        return SettlementResult(payload=body)
