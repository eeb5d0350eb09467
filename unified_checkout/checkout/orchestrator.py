"""
Orchestrateur du checkout: machine à états de bout en bout.

IDLE -> ACQUIRING_CONTEXT -> LOADING_LIBRARY -> INITIALIZING_WIDGET -> READY
     -> CHARGING -> SETTLED (reset auto) | FAILED | CANCELLED ; reset -> IDLE depuis tout état.

Règles:
- start() est ignoré hors IDLE/FAILED/CANCELLED/SETTLED (un seul flux à la fois)
- les écouteurs du widget sont posés AVANT show()
- les événements d'un handle périmé (après reset/restart) sont ignorés
- la libération du widget ne lève jamais: échec journalisé puis ignoré
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Set

import httpx

from unified_checkout import config
from . import widget
from .backend_client import BackendClient
from .capture_context import CaptureContextClient
from .charge import ChargeSubmitter
from .errors import CheckoutError, WidgetError
from .host import Container, HostPage
from .models import (
    RESTARTABLE_STATES,
    CaptureContext,
    CheckoutSnapshot,
    CheckoutState,
    CheckoutTimings,
    PaymentRequestParams,
    SettlementResult,
    TeardownResult,
    TransientToken,
)
from .script_loader import ENTRY_POINT, ScriptLoader

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_SELECTOR = "#unified-checkout-container"

SnapshotListener = Callable[[CheckoutSnapshot], None]

# module unified_checkout.checkout.orchestrator
class CheckoutOrchestrator:
    """
    Pilote une tentative de paiement via la page hôte.
    - host: surface de la page (voir checkout.host.HostPage)
    - api_base / http_client: backend marchand (httpx.AsyncClient injectable)
    - timings: délais nommés (défaut: configuration)
    - trusted_origins: filtres d'origine du fallback postMessage (défaut: configuration)
    - selection_selector / screen_selector: conteneurs du widget (identiques par défaut)
    """

    def __init__(
        self,
        host: HostPage,
        *,
        api_base: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timings: Optional[CheckoutTimings] = None,
        trusted_origins: Optional[Iterable[str]] = None,
        selection_selector: str = DEFAULT_CONTAINER_SELECTOR,
        screen_selector: Optional[str] = None,
        loader: Optional[ScriptLoader] = None,
    ):
        self._host = host
        self._timings = timings or CheckoutTimings.from_config()
        self._trusted_origins = tuple(trusted_origins if trusted_origins is not None else config.TRUSTED_MESSAGE_ORIGINS)
        self._selection_selector = selection_selector
        self._screen_selector = screen_selector or selection_selector

        self._backend = BackendClient(api_base, client=http_client)
        self._contexts = CaptureContextClient(self._backend)
        self._charges = ChargeSubmitter(self._backend)
        self._loader = loader or ScriptLoader(host, grace=self._timings.library_grace)

        self._state = CheckoutState.IDLE
        self._params: Optional[PaymentRequestParams] = None
        self._context: Optional[CaptureContext] = None
        self._handle: Any = None
        self._capability: Optional[widget.WidgetCapability] = None
        self._containers: List[Container] = []
        self._error: Optional[str] = None
        self._result: Optional[SettlementResult] = None

        self._generation = 0
        self._flow: Optional[asyncio.Task] = None
        self._charge_task: Optional[asyncio.Task] = None
        self._timers: Set[asyncio.Task] = set()
        self._listeners: List[SnapshotListener] = []

        # Journal d'instrumentation: ordre des appels au widget
        self.events: List[str] = []

    # --- Lecture de l'état ---
    @property
    def state(self) -> CheckoutState:
        return self._state

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def result(self) -> Optional[SettlementResult]:
        return self._result

    @property
    def context(self) -> Optional[CaptureContext]:
        return self._context

    @property
    def handle(self) -> Any:
        return self._handle

    @property
    def capability(self) -> Optional[widget.WidgetCapability]:
        return self._capability

    @property
    def params(self) -> Optional[PaymentRequestParams]:
        return self._params

    def snapshot(self) -> CheckoutSnapshot:
        return CheckoutSnapshot(state=self._state, error=self._error, result=self._result, params=self._params)

    # --- Couche présentation ---
    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Abonne un écouteur de snapshots; retourne la fonction de désabonnement."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return _unsubscribe

    def dismiss_error(self) -> None:
        """Masque le dernier message d'erreur sans changer d'état."""
        if self._error is not None:
            self._error = None
            self._notify()

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("checkout.orchestrator listener failed")

    def _set_state(self, state: CheckoutState) -> None:
        previous, self._state = self._state, state
        logger.info("checkout.orchestrator state=%s previous=%s", state.value, previous.value)
        self._notify()

    def _fail(self, message: str) -> None:
        logger.warning("checkout.orchestrator failed state=%s message=%s", self._state.value, message)
        self._error = message
        self._set_state(CheckoutState.FAILED)

    def _record(self, name: str) -> None:
        self.events.append(name)

    # --- Transitions ---
    async def start(self, params: PaymentRequestParams) -> bool:
        """
        Lance une tentative (capture context -> librairie -> widget).
        Retourne True si le widget a été affiché, False si ignoré, échoué ou interrompu.
        """
        if self._state not in RESTARTABLE_STATES:
            logger.info("checkout.orchestrator start ignored state=%s", self._state.value)
            return False

        self._generation += 1
        self._cancel_timers()
        self._params = params
        self._error = None
        self._result = None
        self._set_state(CheckoutState.ACQUIRING_CONTEXT)

        flow = asyncio.create_task(self._run(params, self._generation))
        self._flow = flow
        await asyncio.wait({flow})
        return not flow.cancelled() and flow.result()

    async def _run(self, params: PaymentRequestParams, generation: int) -> bool:
        try:
            context = await self._contexts.acquire(params)
            self._context = context
            self._set_state(CheckoutState.LOADING_LIBRARY)

            await self._loader.load(context.library_ref)
            self._set_state(CheckoutState.INITIALIZING_WIDGET)

            await self._initialize_widget(context, generation)
            return self._state not in (CheckoutState.FAILED, CheckoutState.CANCELLED)
        except CheckoutError as e:
            self._fail(e.message)
            return False
        except Exception as e:
            logger.exception("checkout.orchestrator unexpected error")
            self._fail(str(e) or "Failed to initialize payment form")
            return False

    async def _initialize_widget(self, context: CaptureContext, generation: int) -> None:
        accept = self._host.get_global(ENTRY_POINT)
        if not callable(accept):
            raise WidgetError("Payment form not available. Accept function not found.")

        selection = self._host.query_selector(self._selection_selector)
        screen = self._host.query_selector(self._screen_selector)
        if selection is None or screen is None:
            raise WidgetError("Payment form container not found")

        # Au plus un handle vivant: l'ancien est libéré avant d'en créer un nouveau
        self._detach_capability()
        await self._release_handle()
        self._containers = [selection] if screen is selection else [selection, screen]
        for container in self._containers:
            container.clear()

        handle = await widget.bootstrap(accept, context.capture_context_jwt, self._record)
        self._handle = handle

        capability = widget.select_capability(handle, self._trusted_origins)
        self._capability = capability
        capability.attach(
            handle,
            self._host,
            lambda name, data: self._on_widget_event(generation, name, data),
            self._record,
        )

        self._record("show")
        await widget.resolve_awaitable(handle.show({
            "containers": {
                "paymentSelection": selection,
                "paymentScreen": screen,
            }
        }))
        logger.info("checkout.orchestrator widget shown capability=%s", capability.name)

        if capability.needs_ready_fallback and self._state is CheckoutState.INITIALIZING_WIDGET:
            self._schedule(self._timings.ready_fallback, self._ready_fallback, generation)

    async def _ready_fallback(self, generation: int) -> None:
        if generation == self._generation and self._state is CheckoutState.INITIALIZING_WIDGET:
            logger.info("checkout.orchestrator ready assumed after fallback delay")
            self._set_state(CheckoutState.READY)

    def _on_widget_event(self, generation: int, name: str, data: Any = None) -> None:
        if generation != self._generation:
            logger.debug("checkout.orchestrator stale widget event=%s", name)
            return

        if name == "ready":
            if self._state is CheckoutState.INITIALIZING_WIDGET:
                self._set_state(CheckoutState.READY)
        elif name == "paymentMethodSelected":
            logger.info("checkout.orchestrator payment method selected data=%s", data)
        elif name == "token":
            self._on_token(widget.extract_token(data), generation)
        elif name == "error":
            message = getattr(data, "message", None)
            if message is None and isinstance(data, dict):
                message = data.get("message")
            self._fail(str(message) if message else "Payment form error")
        elif name == "cancel":
            logger.info("checkout.orchestrator payment cancelled by user")
            self._error = "Payment cancelled"
            self._set_state(CheckoutState.CANCELLED)

    def _on_token(self, token: TransientToken, generation: int) -> None:
        if self._state not in (CheckoutState.INITIALIZING_WIDGET, CheckoutState.READY):
            logger.warning("checkout.orchestrator token ignored state=%s", self._state.value)
            return
        self._error = None
        self._set_state(CheckoutState.CHARGING)
        self._charge_task = asyncio.create_task(self._settle(token, generation))

    async def _settle(self, token: TransientToken, generation: int) -> None:
        params = self._params
        try:
            result = await self._charges.charge(token, params.amount, params.currency)
        except CheckoutError as e:
            if generation == self._generation:
                self._fail(e.message)
            return
        except Exception as e:
            logger.exception("checkout.orchestrator charge failed")
            if generation == self._generation:
                self._fail(str(e) or "Payment failed")
            return

        if generation != self._generation:
            return
        self._result = result
        self._context = None
        self._set_state(CheckoutState.SETTLED)
        self._schedule(self._timings.auto_reset, self._auto_reset, generation)

    async def _auto_reset(self, generation: int) -> None:
        if generation == self._generation and self._state is CheckoutState.SETTLED:
            await self.reset()

    async def reset(self) -> TeardownResult:
        """
        Retour à IDLE depuis n'importe quel état: annule le flux et les minuteries,
        libère le widget (best-effort), vide les conteneurs et les données détenues.
        """
        self._generation += 1
        current = asyncio.current_task()
        for task in (self._flow, self._charge_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
        self._flow = None
        self._charge_task = None
        self._cancel_timers()

        self._detach_capability()
        teardown = await self._release_handle()

        containers = self._containers or [
            c for c in (self._host.query_selector(s) for s in {self._selection_selector, self._screen_selector})
            if c is not None
        ]
        for container in containers:
            container.clear()
        self._containers = []

        self._context = None
        self._params = None
        self._error = None
        self._result = None
        self._set_state(CheckoutState.IDLE)
        return teardown

    async def aclose(self) -> None:
        """reset + retrait du script + fermeture du client HTTP possédé."""
        await self.reset()
        self._loader.unload()
        await self._backend.aclose()

    async def __aenter__(self) -> "CheckoutOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def join(self) -> None:
        """Attend la fin des tâches en vol (flux, règlement, minuteries)."""
        while True:
            pending = [
                t for t in (self._flow, self._charge_task, *self._timers)
                if t is not None and not t.done() and t is not asyncio.current_task()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    # --- Ressources ---
    def _schedule(self, delay: float, callback: Callable[[int], Awaitable[None]], generation: int) -> None:
        async def _timer() -> None:
            await asyncio.sleep(delay)
            await callback(generation)

        task = asyncio.create_task(_timer())
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)

    def _cancel_timers(self) -> None:
        current = asyncio.current_task()
        for task in list(self._timers):
            if task is not current:
                task.cancel()
        self._timers.clear()

    def _detach_capability(self) -> None:
        capability, self._capability = self._capability, None
        if capability is not None:
            capability.detach()

    async def _release_handle(self) -> TeardownResult:
        handle, self._handle = self._handle, None
        if handle is None:
            return TeardownResult(ok=True)
        result = await widget.release(handle)
        if not result.ok:
            logger.warning("checkout.orchestrator widget teardown failed error=%s", result.error)
        return result
