"""
Client du capture context: demande au backend un contexte signé pour une tentative.
"""
import logging
from typing import Callable, Optional

from . import library_ref
from .backend_client import CAPTURE_CONTEXT_PATH, BackendClient, error_message
from .errors import BackendError
from .models import CaptureContext, LibraryRef, PaymentRequestParams

logger = logging.getLogger(__name__)

# module unified_checkout.checkout.capture_context
class CaptureContextClient:
    """
    acquire(params) -> CaptureContext
    - targetOrigins est envoyé tel quel: une origine incohérente est rejetée par le backend
    - les champs de librairie sont résolus localement depuis le jeton (resolver)
    """

    def __init__(self, backend: BackendClient, resolver: Optional[Callable[[str], LibraryRef]] = None):
        self._backend = backend
        self._resolve = resolver or library_ref.resolve

    async def acquire(self, params: PaymentRequestParams) -> CaptureContext:
        status, body = await self._backend.post_json(
            CAPTURE_CONTEXT_PATH,
            params.to_payload(),
            network_message="Failed to initialize payment form",
        )
        if not 200 <= status < 300:
            # Corps illisible => "Unknown error", corps JSON sans message => "HTTP <status>"
            fallback = "Unknown error" if body is None else f"HTTP {status}"
            raise BackendError(error_message(body, fallback), status=status)
        if not isinstance(body, dict):
            raise BackendError("Invalid capture context response", status=status)

        token = body.get("captureContext")
        if not token or not isinstance(token, str):
            raise BackendError("Capture context missing from response", status=status)

        ref = self._resolve(token)
        logger.info("checkout.capture_context acquired library=%s", ref.url)
        return CaptureContext(
            capture_context_jwt=token,
            client_library_url=ref.url,
            client_library_integrity=ref.integrity,
        )
