"""
Taxonomie des erreurs du checkout.
Toutes les erreurs sont locales à une tentative de paiement: l'orchestrateur les
convertit en état FAILED, elles ne remontent jamais jusqu'à la page hôte.
"""
from typing import Optional

# module unified_checkout.checkout.errors
class CheckoutError(Exception):
    """Erreur de base d'une tentative de checkout (message affichable)."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(CheckoutError):
    """Échec de transport vers le backend (DNS, connexion, timeout)."""
    pass


class BackendError(CheckoutError):
    """Réponse HTTP non-2xx (ou corps illisible) du backend marchand."""
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ScriptLoadError(CheckoutError):
    """La librairie du widget n'a pas pu être chargée."""
    pass


class WidgetError(CheckoutError):
    """Erreur émise par le widget, ou point d'entrée / conteneurs absents."""
    pass


class UserCancelled(CheckoutError):
    """Annulation par l'utilisateur: état terminal distinct, pas une erreur fatale."""
    pass
