"""
Surface de la page hôte utilisée par le checkout.

Le checkout ne manipule jamais directement un navigateur: il passe par ce contrat
(document, <head>, éléments <script>, conteneurs, canal postMessage de la fenêtre,
globales exposées par la librairie du widget). Les tests fournissent une page en mémoire.
"""
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

# module unified_checkout.checkout.host
@dataclass(frozen=True)
class MessageEvent:
    """Message cross-document reçu par la fenêtre (origine émettrice + données)."""
    origin: str
    data: Any


class ScriptElement(Protocol):
    src: str
    integrity: Optional[str]
    cross_origin: Optional[str]
    async_: bool

    def add_event_listener(self, event: str, handler: Callable[..., None]) -> None: ...


class Container(Protocol):
    def clear(self) -> None: ...


class HostPage(Protocol):
    """
    Contrat minimal de la page:
    - origin: origine de la page (envoyée dans targetOrigins)
    - create_script_element / append_to_head / remove_element: injection de scripts
    - get_global: globale de la fenêtre (ex: "Accept"), None si absente
    - query_selector: conteneur DOM ou None
    - add_message_listener: abonnement postMessage, retourne la fonction de désabonnement
    """
    origin: str

    def create_script_element(self) -> ScriptElement: ...

    def append_to_head(self, element: ScriptElement) -> None: ...

    def remove_element(self, element: ScriptElement) -> None: ...

    def get_global(self, name: str) -> Any: ...

    def query_selector(self, selector: str) -> Optional[Container]: ...

    def add_message_listener(self, handler: Callable[[MessageEvent], None]) -> Callable[[], None]: ...
