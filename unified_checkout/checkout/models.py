"""
Modèle de données du checkout (objets immuables d'une tentative de paiement).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from unified_checkout import config

# module unified_checkout.checkout.models
TransientToken = Union[str, Dict[str, Any]]


class CheckoutState(str, Enum):
    IDLE = "idle"
    ACQUIRING_CONTEXT = "acquiring_context"
    LOADING_LIBRARY = "loading_library"
    INITIALIZING_WIDGET = "initializing_widget"
    READY = "ready"
    CHARGING = "charging"
    SETTLED = "settled"
    FAILED = "failed"
    CANCELLED = "cancelled"


# États depuis lesquels un nouveau `start` est accepté
RESTARTABLE_STATES = frozenset({
    CheckoutState.IDLE,
    CheckoutState.FAILED,
    CheckoutState.CANCELLED,
    CheckoutState.SETTLED,
})


@dataclass(frozen=True)
class PaymentRequestParams:
    """
    Paramètres fournis par l'appelant avant l'acquisition du capture context.
    - amount: montant décimal sous forme de chaîne (ex: "10.00")
    - target_origins: doit contenir exactement l'origine de la page hôte
    """
    amount: str
    currency: str
    target_origins: Tuple[str, ...]
    country: str = config.DEFAULT_COUNTRY
    locale: str = config.DEFAULT_LOCALE
    allowed_card_networks: Tuple[str, ...] = tuple(config.ALLOWED_CARD_NETWORKS)
    allowed_payment_types: Tuple[str, ...] = tuple(config.ALLOWED_PAYMENT_TYPES)
    client_version: str = config.CLIENT_VERSION

    @classmethod
    def for_host(cls, host: Any, amount: str, currency: str, **kwargs: Any) -> "PaymentRequestParams":
        """targetOrigins = [origine de la page hôte], seule valeur acceptée par le backend."""
        return cls(amount=amount, currency=currency, target_origins=(host.origin,), **kwargs)

    def to_payload(self) -> Dict[str, Any]:
        """Corps JSON attendu par POST /api/unified-checkout/capture-context."""
        return {
            "allowedCardNetworks": list(self.allowed_card_networks),
            "allowedPaymentTypes": list(self.allowed_payment_types),
            "amount": self.amount,
            "currency": self.currency,
            "country": self.country,
            "locale": self.locale,
            "clientVersion": self.client_version,
            "targetOrigins": list(self.target_origins),
        }


@dataclass(frozen=True)
class LibraryRef:
    url: str
    integrity: Optional[str] = None


@dataclass(frozen=True)
class CaptureContext:
    capture_context_jwt: str
    client_library_url: str
    client_library_integrity: Optional[str] = None

    @property
    def library_ref(self) -> LibraryRef:
        return LibraryRef(url=self.client_library_url, integrity=self.client_library_integrity)


@dataclass(frozen=True)
class SettlementResult:
    """Corps JSON opaque renvoyé par le backend (objet en général)."""
    payload: Any = field(default_factory=dict)


@dataclass(frozen=True)
class TeardownResult:
    """Résultat de la libération du widget: journalisé puis ignoré, jamais levé."""
    ok: bool
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class CheckoutSnapshot:
    """Vue exposée à la couche présentation: état + dernière erreur + dernier résultat."""
    state: CheckoutState
    error: Optional[str] = None
    result: Optional[SettlementResult] = None
    params: Optional[PaymentRequestParams] = None


@dataclass(frozen=True)
class CheckoutTimings:
    """
    Délais nommés de la table de transitions (secondes).
    - library_grace: attente après le chargement du script (auto-enregistrement de la librairie)
    - ready_fallback: passage à READY quand le widget n'expose pas d'événements
    - auto_reset: retour à IDLE après un règlement réussi
    """
    library_grace: float = 0.5
    ready_fallback: float = 1.0
    auto_reset: float = 5.0

    @classmethod
    def from_config(cls) -> "CheckoutTimings":
        return cls(
            library_grace=config.LIBRARY_GRACE_SECONDS,
            ready_fallback=config.READY_FALLBACK_SECONDS,
            auto_reset=config.AUTO_RESET_SECONDS,
        )
