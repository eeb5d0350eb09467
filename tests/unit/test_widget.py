import json

import pytest

from tests.fakes import FakeAccept, FakeEventWidget, FakeHostPage, FakePollingWidget
from unified_checkout.checkout import widget

TRUSTED = ("cybersource.com",)


@pytest.mark.asyncio
async def test_bootstrap_two_steps_in_embedded_mode():
    log = []
    accept = FakeAccept(lambda: FakeEventWidget(log))

    handle = await widget.bootstrap(accept, "jwt-123", log.append)

    assert accept.tokens == ["jwt-123"]
    assert accept.sidebar_args == [False]
    assert handle is accept.widget
    assert log == ["accept", "unified_payments"]


@pytest.mark.asyncio
async def test_bootstrap_accepts_synchronous_library():
    class SyncAccept:
        def __call__(self, token):
            return self

        def unifiedPayments(self, sidebar):
            return "handle"

    assert await widget.bootstrap(SyncAccept(), "jwt", lambda _: None) == "handle"


@pytest.mark.asyncio
async def test_release_calls_destroy():
    handle = FakeEventWidget([])
    result = await widget.release(handle)
    assert result.ok is True
    assert handle.destroyed is True


@pytest.mark.asyncio
async def test_release_without_destroy_is_ok():
    result = await widget.release(FakePollingWidget([]))
    assert result.ok is True


@pytest.mark.asyncio
async def test_release_failure_is_returned_not_raised():
    boom = RuntimeError("destroy exploded")
    result = await widget.release(FakeEventWidget([], destroy_error=boom))
    assert result.ok is False
    assert result.error is boom


@pytest.mark.parametrize(
    "data, expected",
    [
        ({"transientToken": "tt", "token": "t"}, "tt"),
        ({"token": "t"}, "t"),
        ({"other": 1}, {"other": 1}),
        ("raw-jwt", "raw-jwt"),
    ],
)
def test_extract_token_precedence(data, expected):
    assert widget.extract_token(data) == expected


def test_select_capability_prefers_events():
    assert isinstance(widget.select_capability(FakeEventWidget([]), TRUSTED), widget.EventCapable)
    polling = widget.select_capability(FakePollingWidget([]), TRUSTED)
    assert isinstance(polling, widget.PollingOnly)
    assert polling.needs_ready_fallback is True


def test_event_capable_registers_all_events():
    log = []
    handle = FakeEventWidget(log)
    received = []

    widget.EventCapable().attach(handle, FakeHostPage(), lambda n, d: received.append((n, d)), lambda e: None)

    assert log == [f"on:{e}" for e in widget.WIDGET_EVENTS]
    handle.emit("token", {"transientToken": "tt"})
    assert received == [("token", {"transientToken": "tt"})]


def test_polling_only_filters_untrusted_origins_and_non_token_messages():
    host = FakeHostPage()
    received = []
    capability = widget.PollingOnly(TRUSTED)
    capability.attach(FakePollingWidget([]), host, lambda n, d: received.append((n, d)), lambda e: None)

    host.post_message("https://evil.example", {"transientToken": "x"})
    host.post_message("https://testup.cybersource.com", {"hello": "world"})
    host.post_message("https://testup.cybersource.com", "not json")
    host.post_message("https://testup.cybersource.com", json.dumps({"token": "from-string"}))
    host.post_message("https://testup.cybersource.com", {"transientToken": "tt"})

    assert received == [("token", {"token": "from-string"}), ("token", {"transientToken": "tt"})]


def test_polling_only_detach_unsubscribes():
    host = FakeHostPage()
    received = []
    capability = widget.PollingOnly(TRUSTED)
    capability.attach(FakePollingWidget([]), host, lambda n, d: received.append(n), lambda e: None)

    capability.detach()
    host.post_message("https://testup.cybersource.com", {"transientToken": "tt"})

    assert host.message_handlers == []
    assert received == []


def test_polling_only_registers_direct_token_listener_when_available():
    events = []
    handle = FakePollingWidget([], direct_listener=True)
    received = []
    widget.PollingOnly(TRUSTED).attach(handle, FakeHostPage(), lambda n, d: received.append((n, d)), events.append)

    handle.direct_handlers["token"]({"transientToken": "direct"})

    assert events == ["message_listener", "direct_listener"]
    assert received == [("token", {"transientToken": "direct"})]


@pytest.mark.parametrize(
    "origin, trusted",
    [
        ("https://testup.cybersource.com", True),
        ("https://cybersource.com", True),
        ("https://TestUp.CyberSource.com:443", True),
        ("https://cybersource.com.attacker.net", False),
        ("https://evilcybersource.com", False),
        ("https://attacker.net/cybersource.com", False),
        ("http://testup.cybersource.com", False),
        ("null", False),
        ("", False),
    ],
)
def test_polling_only_trusts_configured_hosts_and_subdomains(origin, trusted):
    assert widget.PollingOnly(TRUSTED).is_trusted(origin) is trusted


def test_polling_only_ignores_look_alike_host():
    host = FakeHostPage()
    received = []
    widget.PollingOnly(TRUSTED).attach(FakePollingWidget([]), host, lambda n, d: received.append(d), lambda e: None)

    host.post_message("https://cybersource.com.attacker.net", {"transientToken": "forged"})

    assert received == []
