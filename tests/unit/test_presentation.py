import json

import pytest

from unified_checkout.checkout.models import CheckoutSnapshot, CheckoutState, PaymentRequestParams, SettlementResult
from unified_checkout.checkout.presentation import project

PARAMS = PaymentRequestParams(amount="10.00", currency="USD", target_origins=("https://shop.example",))


@pytest.mark.parametrize(
    "state, form, loading, payment",
    [
        (CheckoutState.IDLE, True, False, False),
        (CheckoutState.ACQUIRING_CONTEXT, False, True, False),
        (CheckoutState.LOADING_LIBRARY, False, True, False),
        (CheckoutState.INITIALIZING_WIDGET, False, True, True),
        (CheckoutState.READY, False, False, True),
        (CheckoutState.CHARGING, False, True, True),
        (CheckoutState.FAILED, True, False, False),
        (CheckoutState.CANCELLED, True, False, False),
    ],
)
def test_sections_per_state(state, form, loading, payment):
    view = project(CheckoutSnapshot(state=state, params=PARAMS))
    assert (view.config_form, view.loading, view.payment_container) == (form, loading, payment)


def test_amount_label_only_while_paying():
    assert project(CheckoutSnapshot(state=CheckoutState.READY, params=PARAMS)).amount_label == "10.00 USD"
    assert project(CheckoutSnapshot(state=CheckoutState.IDLE, params=PARAMS)).amount_label is None


def test_error_banner_follows_error_text():
    view = project(CheckoutSnapshot(state=CheckoutState.FAILED, error="Card declined"))
    assert view.error_banner is True
    assert view.error_text == "Card declined"

    dismissed = project(CheckoutSnapshot(state=CheckoutState.FAILED, error=None))
    assert dismissed.error_banner is False


def test_success_banner_renders_indented_json():
    result = SettlementResult(payload={"id": "ch_1", "status": "AUTHORIZED"})
    view = project(CheckoutSnapshot(state=CheckoutState.SETTLED, result=result))

    assert view.success_banner is True
    assert view.config_form is True
    assert json.loads(view.success_text) == {"id": "ch_1", "status": "AUTHORIZED"}
    assert "\n  " in view.success_text
