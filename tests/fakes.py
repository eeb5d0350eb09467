"""
Page hôte et librairie de widget en mémoire pour les tests.
"""
import asyncio
import base64
import json
from typing import Any, Callable, Dict, List, Optional

from unified_checkout.checkout.host import MessageEvent

CONTAINER = "#unified-checkout-container"


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def make_jwt(payload: Any, header: Optional[Dict[str, Any]] = None) -> str:
    head = b64url(json.dumps(header or {"alg": "RS256", "kid": "k1"}).encode("utf-8"))
    body = b64url(json.dumps(payload).encode("utf-8"))
    return f"{head}.{body}.c2lnbmF0dXJl"


def context_payload(url: Optional[str], integrity: Optional[str] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    if url is not None:
        data["clientLibrary"] = url
    if integrity is not None:
        data["clientLibraryIntegrity"] = integrity
    return {"ctx": [{"data": data}], "iat": 1700000000}


class FakeScriptElement:
    def __init__(self):
        self.src = ""
        self.integrity = None
        self.cross_origin = None
        self.async_ = False
        self.listeners: Dict[str, List[Callable[..., None]]] = {}

    def add_event_listener(self, event, handler):
        self.listeners.setdefault(event, []).append(handler)

    def fire(self, event, payload=None):
        for handler in list(self.listeners.get(event, [])):
            handler(payload)


class FakeContainer:
    def __init__(self, children=None):
        self.children = list(children or [])
        self.clear_calls = 0

    def clear(self):
        self.children.clear()
        self.clear_calls += 1


class FakeHostPage:
    """
    - auto_load: le <script> injecté déclenche "load" (ou "error" si fail_load) au tour de boucle suivant
    - library: objet installé comme globale "Accept" au chargement
    """

    def __init__(self, origin="https://shop.example", *, library=None, auto_load=True, fail_load=False):
        self.origin = origin
        self.library = library
        self.auto_load = auto_load
        self.fail_load = fail_load
        self.head: List[FakeScriptElement] = []
        self.appended: List[FakeScriptElement] = []
        self.globals: Dict[str, Any] = {}
        self.containers: Dict[str, FakeContainer] = {CONTAINER: FakeContainer(["stale form"])}
        self.message_handlers: List[Callable[[MessageEvent], None]] = []

    def create_script_element(self):
        return FakeScriptElement()

    def append_to_head(self, element):
        self.head.append(element)
        self.appended.append(element)
        if self.auto_load:
            asyncio.get_running_loop().call_soon(self.complete_load, element)

    def complete_load(self, element):
        if self.fail_load:
            element.fire("error", {"type": "error"})
            return
        if self.library is not None:
            self.globals["Accept"] = self.library
        element.fire("load")

    def remove_element(self, element):
        if element in self.head:
            self.head.remove(element)

    def get_global(self, name):
        return self.globals.get(name)

    def query_selector(self, selector):
        return self.containers.get(selector)

    def add_message_listener(self, handler):
        self.message_handlers.append(handler)

        def _unsubscribe():
            if handler in self.message_handlers:
                self.message_handlers.remove(handler)
        return _unsubscribe

    def post_message(self, origin, data):
        for handler in list(self.message_handlers):
            handler(MessageEvent(origin=origin, data=data))


class FakeEventWidget:
    """Payment-instance avec on(): journalise on:<event> puis show."""

    def __init__(self, log: List[str], destroy_error: Optional[Exception] = None):
        self.log = log
        self.handlers: Dict[str, Callable[..., None]] = {}
        self.show_config = None
        self.destroyed = False
        self.destroy_error = destroy_error

    def on(self, name, handler):
        self.log.append(f"on:{name}")
        self.handlers[name] = handler

    async def show(self, config):
        self.log.append("show")
        self.show_config = config

    def destroy(self):
        if self.destroy_error is not None:
            raise self.destroy_error
        self.destroyed = True

    def emit(self, name, data=None):
        self.handlers[name](data)


class FakePollingWidget:
    """Payment-instance sans on() ni destroy()."""

    def __init__(self, log: List[str], direct_listener: bool = False):
        self.log = log
        self.show_config = None
        self.direct_handlers: Dict[str, Callable[..., None]] = {}
        if direct_listener:
            self.addEventListener = self._add_event_listener

    def _add_event_listener(self, name, handler):
        self.direct_handlers[name] = handler

    def show(self, config):
        self.log.append("show")
        self.show_config = config


class FakeAccept:
    """Globale Accept(token) -> accept-instance; unifiedPayments(sidebar) -> widget."""

    def __init__(self, widget_factory: Callable[[], Any]):
        self.widget_factory = widget_factory
        self.tokens: List[str] = []
        self.sidebar_args: List[bool] = []
        self.widgets: List[Any] = []

    async def __call__(self, token):
        self.tokens.append(token)
        return self

    async def unifiedPayments(self, sidebar):
        self.sidebar_args.append(sidebar)
        instance = self.widget_factory()
        self.widgets.append(instance)
        return instance

    @property
    def widget(self):
        return self.widgets[-1]
