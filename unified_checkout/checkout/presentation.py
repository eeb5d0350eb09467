"""
Projection de l'état du checkout vers les sections visibles de la page.
Fonction pure: aucune logique métier, aucun effet de bord.
"""
import json
from dataclasses import dataclass
from typing import Optional

from .models import CheckoutSnapshot, CheckoutState

LOADING_STATES = frozenset({
    CheckoutState.ACQUIRING_CONTEXT,
    CheckoutState.LOADING_LIBRARY,
    CheckoutState.INITIALIZING_WIDGET,
    CheckoutState.CHARGING,
})
FORM_STATES = frozenset({
    CheckoutState.IDLE,
    CheckoutState.FAILED,
    CheckoutState.CANCELLED,
    CheckoutState.SETTLED,
})
PAYMENT_STATES = frozenset({
    CheckoutState.INITIALIZING_WIDGET,
    CheckoutState.READY,
    CheckoutState.CHARGING,
})

# module unified_checkout.checkout.presentation
@dataclass(frozen=True)
class SectionVisibility:
    config_form: bool
    loading: bool
    payment_container: bool
    error_banner: bool
    success_banner: bool
    error_text: Optional[str] = None
    success_text: Optional[str] = None
    amount_label: Optional[str] = None


def project(snapshot: CheckoutSnapshot) -> SectionVisibility:
    """
    - formulaire: IDLE/FAILED/CANCELLED/SETTLED
    - chargement: acquisition, librairie, initialisation widget, règlement
    - conteneur de paiement: INITIALIZING_WIDGET/READY/CHARGING (libellé "<montant> <devise>")
    - bannière erreur: dès qu'un message d'erreur est présent
    - bannière succès: SETTLED, résultat affiché en JSON indenté
    """
    state = snapshot.state
    success_text = None
    if state is CheckoutState.SETTLED and snapshot.result is not None:
        success_text = json.dumps(snapshot.result.payload, indent=2)

    amount_label = None
    if snapshot.params is not None and state in PAYMENT_STATES:
        amount_label = f"{snapshot.params.amount} {snapshot.params.currency}"

    return SectionVisibility(
        config_form=state in FORM_STATES,
        loading=state in LOADING_STATES,
        payment_container=state in PAYMENT_STATES,
        error_banner=bool(snapshot.error),
        success_banner=success_text is not None,
        error_text=snapshot.error or None,
        success_text=success_text,
        amount_label=amount_label,
    )
