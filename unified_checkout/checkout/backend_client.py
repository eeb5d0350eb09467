"""
Adaptateur HTTP du backend marchand: centralise les appels JSON (httpx asynchrone).
"""
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from unified_checkout import config
from .errors import NetworkError

logger = logging.getLogger(__name__)

CAPTURE_CONTEXT_PATH = "/api/unified-checkout/capture-context"
CHARGE_PATH = "/api/unified-checkout/charge"

# module unified_checkout.checkout.backend_client
def error_message(body: Any, fallback: str) -> str:
    """Message d'erreur du corps JSON ({"message": "..."}) ou fallback."""
    if isinstance(body, dict):
        message = body.get("message")
        if message:
            return str(message)
    return fallback


class BackendClient:
    """
    Client JSON du backend marchand.
    - api_base: URL de base (défaut: config.API_BASE_URL)
    - client: httpx.AsyncClient injectable (tests: MockTransport / ASGITransport)
    """

    def __init__(
        self,
        api_base: Optional[str] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.api_base = (api_base or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def post_json(
        self,
        path: str,
        payload: Dict[str, Any],
        *,
        network_message: str,
    ) -> Tuple[int, Any]:
        """
        POST JSON puis retourne (status_code, body).
        - body vaut None si la réponse n'est pas du JSON
        - Échec de transport: NetworkError(network_message), cause chaînée
        """
        url = f"{self.api_base}{path}"
        try:
            response = await self._get_client().post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.warning("checkout.backend network error url=%s error=%s", url, e)
            raise NetworkError(network_message) from e

        try:
            body = response.json()
        except ValueError:
            body = None
        logger.debug("checkout.backend url=%s status=%s", url, response.status_code)
        return response.status_code, body

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
