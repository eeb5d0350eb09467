"""
Widget hébergé: bootstrap en deux étapes, capacités d'événements, libération.

Capacité choisie une seule fois après le bootstrap:
- EventCapable: l'instance expose on(name, handler) -> écoute des 5 événements
- PollingOnly: pas de on() -> écoute postMessage filtrée par origines de confiance
  (+ écouteur direct addEventListener("token") si l'instance en expose un)
"""
import inspect
import json
import logging
from typing import Any, Callable, Iterable, Optional, Tuple
from urllib.parse import urlsplit

from .host import HostPage, MessageEvent
from .models import TeardownResult, TransientToken

logger = logging.getLogger(__name__)

WIDGET_EVENTS = ("ready", "paymentMethodSelected", "token", "error", "cancel")
TOKEN_FIELDS = ("transientToken", "token")

Dispatch = Callable[[str, Any], None]
Recorder = Callable[[str], None]

# module unified_checkout.checkout.widget
async def resolve_awaitable(value: Any) -> Any:
    """Les méthodes du widget peuvent retourner une valeur ou un awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value

async def bootstrap(accept: Callable[[str], Any], capture_context_jwt: str, record: Recorder) -> Any:
    """
    accept-instance avec le jeton brut, puis payment-instance en mode embarqué
    (unifiedPayments(False), pas de redirection). Retourne le handle du widget.
    """
    record("accept")
    accept_instance = await resolve_awaitable(accept(capture_context_jwt))
    record("unified_payments")
    return await resolve_awaitable(accept_instance.unifiedPayments(False))

async def release(handle: Any) -> TeardownResult:
    """destroy() best-effort: l'échec est retourné, jamais levé."""
    destroy = getattr(handle, "destroy", None)
    if not callable(destroy):
        return TeardownResult(ok=True)
    try:
        await resolve_awaitable(destroy())
    except Exception as e:
        return TeardownResult(ok=False, error=e)
    return TeardownResult(ok=True)

def extract_token(data: Any) -> TransientToken:
    """transientToken, sinon token, sinon la donnée elle-même."""
    if isinstance(data, dict):
        for name in TOKEN_FIELDS:
            if data.get(name):
                return data[name]
    return data

def _has_token_field(data: Any) -> bool:
    return isinstance(data, dict) and any(data.get(name) for name in TOKEN_FIELDS)


class WidgetCapability:
    name = "base"
    needs_ready_fallback = False

    def attach(self, handle: Any, host: HostPage, dispatch: Dispatch, record: Recorder) -> None:
        raise NotImplementedError

    def detach(self) -> None:
        return None


class EventCapable(WidgetCapability):
    name = "events"

    def attach(self, handle, host, dispatch, record):
        for event in WIDGET_EVENTS:
            handle.on(event, _bind(dispatch, event))
            record(f"on:{event}")


class PollingOnly(WidgetCapability):
    name = "post_message"
    needs_ready_fallback = True

    def __init__(self, trusted_origins: Iterable[str]):
        # Entrées = noms d'hôte ("cybersource.com"), comparées en minuscules
        self.trusted_origins: Tuple[str, ...] = tuple(
            o.strip().lower().lstrip(".") for o in trusted_origins if o and o.strip()
        )
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._dispatch: Optional[Dispatch] = None

    def is_trusted(self, origin: str) -> bool:
        """
        Origine https dont l'hôte est une entrée de confiance ou l'un de ses sous-domaines
        (ex: "cybersource.com" accepte testup.cybersource.com, refuse cybersource.com.attacker.net).
        """
        try:
            parts = urlsplit(origin or "")
        except ValueError:
            return False
        host = (parts.hostname or "").rstrip(".")
        if parts.scheme != "https" or not host:
            return False
        return any(host == o or host.endswith("." + o) for o in self.trusted_origins)

    def attach(self, handle, host, dispatch, record):
        self._dispatch = dispatch
        self._unsubscribe = host.add_message_listener(self._on_message)
        record("message_listener")
        add_listener = getattr(handle, "addEventListener", None)
        if callable(add_listener):
            try:
                add_listener("token", _bind(dispatch, "token"))
                record("direct_listener")
            except Exception as e:
                logger.warning("checkout.widget direct listener unavailable error=%s", e)

    def _on_message(self, event: MessageEvent) -> None:
        if self._dispatch is None or not self.is_trusted(event.origin):
            return
        data = event.data
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                return
        if _has_token_field(data):
            logger.info("checkout.widget token via postMessage origin=%s", event.origin)
            self._dispatch("token", data)

    def detach(self):
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        self._dispatch = None
        if unsubscribe is not None:
            unsubscribe()


def _bind(dispatch: Dispatch, event: str) -> Callable[..., None]:
    def _handler(data: Any = None, *_args) -> None:
        dispatch(event, data)
    return _handler

def select_capability(handle: Any, trusted_origins: Iterable[str]) -> WidgetCapability:
    if callable(getattr(handle, "on", None)):
        return EventCapable()
    logger.warning("checkout.widget event listeners not supported, using postMessage fallback")
    return PollingOnly(trusted_origins)
