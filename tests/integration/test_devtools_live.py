"""Integration tests for ChromeDevTools against a real Chrome.

Start Chrome with --remote-debugging-port and export its browser WebSocket
URL (from http://127.0.0.1:9222/json/version) as CHROME_DEVTOOLS_URL.
Skipped otherwise.
"""

import os

import pytest

from chrome_devtools.devtools import ChromeDevTools
from chrome_devtools.exceptions import WaitTimeoutError

PAGE = (
    "data:text/html,<title>Live</title>"
    "<input id=q><button id=go onclick=\"document.title='clicked'\">Go</button>"
)


@pytest.fixture
def devtools():
    ws_url = os.getenv("CHROME_DEVTOOLS_URL")
    if not ws_url:
        pytest.skip("CHROME_DEVTOOLS_URL not set")

    client = ChromeDevTools(ws_url, load_timeout=30.0)
    client.connect()
    client.create_target("about:blank")
    yield client

    client.close_page()
    client.close()


@pytest.mark.integration
def test_navigate_and_read_page(devtools):
    devtools.navigate(PAGE)

    assert devtools.get_title() == "Live"
    assert devtools.get_url().startswith("data:text/html")
    assert devtools.find_by_selector("#go") is not None
    assert devtools.find_by_selector("#missing") is None


@pytest.mark.integration
def test_type_and_click(devtools):
    devtools.navigate(PAGE)

    devtools.type_into_selector("#q", "hello")
    assert devtools.evaluate("document.querySelector('#q').value") == "hello"

    devtools.click_selector("#go")
    assert devtools.get_title() == "clicked"


@pytest.mark.integration
def test_type_text_into_focused_input(devtools):
    devtools.navigate(PAGE)
    devtools.evaluate("document.querySelector('#q').focus()")

    devtools.type_text("hé", delay_ms=5)

    assert devtools.evaluate("document.querySelector('#q').value") == "hé"


@pytest.mark.integration
def test_wait_selector(devtools):
    devtools.navigate(PAGE)
    devtools.evaluate(
        "setTimeout(() => document.body.appendChild(document.createElement('main')), 200)"
    )

    assert devtools.wait_selector("main", timeout_ms=3000, poll_interval_ms=50)

    with pytest.raises(WaitTimeoutError):
        devtools.wait_selector("#never", timeout_ms=200, poll_interval_ms=50)
