# unified_checkout.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du checkout.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Expose l'URL du backend marchand et les paramètres par défaut d'une demande de paiement
- Expose les délais nommés de la machine à états (grâce librairie, fallback ready, reset auto)
- Expose la configuration du backend sandbox (signature des capture contexts, origines, CORS)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _float_env(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default

def _list_env(name: str, default: str) -> list[str]:
    return [v.strip() for v in _clean_env(os.getenv(name) or default).split(",") if v.strip()]

# Backend marchand (capture context + charge)
# - API_BASE_URL sans slash final; on préfixe en https:// si le schéma manque
API_BASE_URL = _clean_env(os.getenv("API_BASE_URL") or "http://localhost:8000")
if API_BASE_URL and not API_BASE_URL.startswith("http"):
    API_BASE_URL = "https://" + API_BASE_URL
API_BASE_URL = API_BASE_URL.rstrip("/")

HTTP_TIMEOUT_SECONDS = _float_env("HTTP_TIMEOUT_SECONDS", 30.0)

# Paramètres par défaut d'une demande de paiement
CLIENT_VERSION = _clean_env(os.getenv("CLIENT_VERSION") or "0.31")
DEFAULT_COUNTRY = _clean_env(os.getenv("DEFAULT_COUNTRY") or "KE")
DEFAULT_LOCALE = _clean_env(os.getenv("DEFAULT_LOCALE") or "en_KE")
DEFAULT_AMOUNT = _clean_env(os.getenv("DEFAULT_AMOUNT") or "1.50")
DEFAULT_CURRENCY = _clean_env(os.getenv("DEFAULT_CURRENCY") or "USD")
SUPPORTED_CURRENCIES = _list_env("SUPPORTED_CURRENCIES", "USD,KES")
ALLOWED_CARD_NETWORKS = _list_env("ALLOWED_CARD_NETWORKS", "VISA,MASTERCARD,AMEX")
ALLOWED_PAYMENT_TYPES = _list_env("ALLOWED_PAYMENT_TYPES", "PANENTRY")

# Librairie du widget: URL de repli quand le capture context n'est pas exploitable
FALLBACK_CLIENT_LIBRARY_URL = _clean_env(
    os.getenv("FALLBACK_CLIENT_LIBRARY_URL")
    or "https://testup.cybersource.com/uc/v1/assets/SecureAcceptance.js"
)

# Hôtes acceptés pour le fallback postMessage (origine https, hôte égal ou sous-domaine)
TRUSTED_MESSAGE_ORIGINS = _list_env("TRUSTED_MESSAGE_ORIGINS", "cybersource.com")

# Délais nommés (secondes)
LIBRARY_GRACE_SECONDS = _float_env("LIBRARY_GRACE_SECONDS", 0.5)
READY_FALLBACK_SECONDS = _float_env("READY_FALLBACK_SECONDS", 1.0)
AUTO_RESET_SECONDS = _float_env("AUTO_RESET_SECONDS", 5.0)

# Backend sandbox (dev/tests): signature HS256 des capture contexts
SANDBOX_SIGNING_SECRET = _clean_env(os.getenv("SANDBOX_SIGNING_SECRET") or "sandbox-signing-secret-change-me")
SANDBOX_CLIENT_LIBRARY_URL = _clean_env(os.getenv("SANDBOX_CLIENT_LIBRARY_URL") or FALLBACK_CLIENT_LIBRARY_URL)
SANDBOX_CLIENT_LIBRARY_INTEGRITY = _clean_env(os.getenv("SANDBOX_CLIENT_LIBRARY_INTEGRITY") or "")
SANDBOX_CONTEXT_TTL_SECONDS = int(_float_env("SANDBOX_CONTEXT_TTL_SECONDS", 900))
# Vide = toutes les origines acceptées
SANDBOX_ALLOWED_ORIGINS = _list_env("SANDBOX_ALLOWED_ORIGINS", "")

# CORS (dev)
CORS_ORIGINS = _list_env("CORS_ORIGINS", "*")
