"""
Résolution de la librairie du widget à partir du capture context.

Le payload du JWT est décodé SANS vérifier la signature (c'est le rôle de l'émetteur).
Toute erreur (segments, base64, JSON, champ absent) retombe sur
l'URL de repli sans empreinte d'intégrité. Ce module ne lève jamais d'exception.
"""
import base64
import json
import logging
from typing import Any, Dict, Optional

from unified_checkout import config
from .models import LibraryRef

logger = logging.getLogger(__name__)

# module unified_checkout.checkout.library_ref
def _b64url_decode(segment: str) -> bytes:
    """Décode un segment base64url (- -> +, _ -> /, padding restauré)."""
    value = segment.replace("-", "+").replace("_", "/")
    value += "=" * (-len(value) % 4)
    return base64.b64decode(value, validate=True)

def decode_payload(jwt: str) -> Dict[str, Any]:
    """
    Retourne le payload JSON (segment central) d'un jeton à trois segments.
    Lève ValueError/TypeError si le jeton est mal formé.
    """
    parts = jwt.split(".")
    if len(parts) != 3:
        raise ValueError(f"expected 3 segments, got {len(parts)}")
    payload = json.loads(_b64url_decode(parts[1]))
    if not isinstance(payload, dict):
        raise ValueError("payload is not a JSON object")
    return payload

def resolve(jwt: str, fallback_url: Optional[str] = None) -> LibraryRef:
    """
    Extrait {url, integrity} depuis payload.ctx[0].data.{clientLibrary, clientLibraryIntegrity}.
    - Succès: URL et intégrité renvoyées telles quelles (intégrité None si absente/vide)
    - Échec à n'importe quelle étape: URL de repli, intégrité None, warning journalisé
    """
    fallback = LibraryRef(url=fallback_url or config.FALLBACK_CLIENT_LIBRARY_URL, integrity=None)
    try:
        payload = decode_payload(jwt)
        data = payload["ctx"][0]["data"]
        url = data.get("clientLibrary")
        if not url or not isinstance(url, str):
            logger.warning("checkout.library_ref fallback reason=clientLibrary missing")
            return fallback
        integrity = data.get("clientLibraryIntegrity") or None
        return LibraryRef(url=url, integrity=integrity)
    except Exception as e:
        logger.warning("checkout.library_ref fallback reason=%s", e)
        return fallback
