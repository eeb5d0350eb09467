"""
Module 'checkout' (feature-first): point d'entrée public.
Réunit client capture context, résolution de librairie, chargeur de script,
widget, règlement, orchestrateur et projection présentation.
"""

from .errors import (
    CheckoutError,
    NetworkError,
    BackendError,
    ScriptLoadError,
    WidgetError,
    UserCancelled,
)
from .models import (
    CheckoutState,
    PaymentRequestParams,
    CaptureContext,
    LibraryRef,
    SettlementResult,
    TeardownResult,
    CheckoutSnapshot,
    CheckoutTimings,
)
from .host import HostPage, MessageEvent
from .library_ref import resolve
from .script_loader import ScriptLoader
from .backend_client import BackendClient
from .capture_context import CaptureContextClient
from .charge import ChargeSubmitter
from .orchestrator import CheckoutOrchestrator
from .presentation import SectionVisibility, project

__all__ = [
    # errors
    "CheckoutError",
    "NetworkError",
    "BackendError",
    "ScriptLoadError",
    "WidgetError",
    "UserCancelled",
    # models
    "CheckoutState",
    "PaymentRequestParams",
    "CaptureContext",
    "LibraryRef",
    "SettlementResult",
    "TeardownResult",
    "CheckoutSnapshot",
    "CheckoutTimings",
    # host
    "HostPage",
    "MessageEvent",
    # components
    "resolve",
    "ScriptLoader",
    "BackendClient",
    "CaptureContextClient",
    "ChargeSubmitter",
    "CheckoutOrchestrator",
    # presentation
    "SectionVisibility",
    "project",
]
