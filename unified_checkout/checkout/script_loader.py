"""
Chargement dynamique de la librairie du widget (une seule injection par chargeur).
"""
import asyncio
import logging
from typing import Optional

from .errors import ScriptLoadError
from .host import HostPage, ScriptElement
from .models import LibraryRef

logger = logging.getLogger(__name__)

ENTRY_POINT = "Accept"

# module unified_checkout.checkout.script_loader
class ScriptLoader:
    """
    Injecte le <script> de la librairie et attend son chargement.
    - Idempotent: si déjà chargé ET la globale d'entrée existe, retour immédiat
    - integrity + crossOrigin="anonymous" uniquement si une empreinte est fournie
    - Un seul chargement en vol: les appels concurrents attendent la même issue
    - Après "load", attend `grace` secondes (auto-enregistrement de la librairie)
    """

    def __init__(self, host: HostPage, *, grace: float = 0.5, entry_point: str = ENTRY_POINT):
        self._host = host
        self._grace = grace
        self._entry_point = entry_point
        self._loaded = False
        self._element: Optional[ScriptElement] = None
        self._pending: Optional[asyncio.Task] = None

    @property
    def loaded(self) -> bool:
        return self._loaded

    def is_ready(self) -> bool:
        return self._loaded and self._host.get_global(self._entry_point) is not None

    async def load(self, ref: LibraryRef) -> None:
        if self.is_ready():
            logger.debug("checkout.script_loader already loaded url=%s", ref.url)
            return
        if self._pending is None:
            self._pending = asyncio.create_task(self._inject(ref))
            # L'issue est lue même si tous les appelants ont été annulés
            self._pending.add_done_callback(lambda t: t.cancelled() or t.exception())
        pending = self._pending
        try:
            await asyncio.shield(pending)
        finally:
            if pending.done() and self._pending is pending:
                self._pending = None

    async def _inject(self, ref: LibraryRef) -> None:
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future = loop.create_future()

        element = self._host.create_script_element()
        element.src = ref.url
        # integrity et crossOrigin="anonymous" toujours ensemble
        if ref.integrity:
            element.integrity = ref.integrity
            element.cross_origin = "anonymous"
        element.async_ = True

        def _on_load(*_args) -> None:
            if not outcome.done():
                outcome.set_result(None)

        def _on_error(*_args) -> None:
            if not outcome.done():
                outcome.set_exception(ScriptLoadError("Failed to load payment form"))

        element.add_event_listener("load", _on_load)
        element.add_event_listener("error", _on_error)
        logger.info("checkout.script_loader inject url=%s integrity=%s", ref.url, bool(ref.integrity))
        self._host.append_to_head(element)
        self._element = element

        try:
            await outcome
        except ScriptLoadError:
            logger.error("checkout.script_loader failed url=%s", ref.url)
            self._remove_element()
            raise

        self._loaded = True
        logger.info("checkout.script_loader loaded url=%s", ref.url)
        if self._grace > 0:
            await asyncio.sleep(self._grace)

    def _remove_element(self) -> None:
        element, self._element = self._element, None
        if element is not None:
            self._host.remove_element(element)

    def unload(self) -> None:
        """Retire le <script> injecté (la globale éventuelle reste côté page)."""
        self._remove_element()
        self._loaded = False
