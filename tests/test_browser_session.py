from __future__ import annotations

from typing import Any

import pytest
from fakes import FakeConn

from mcp_servers.chrome_control.browser_session import PageSession
from mcp_servers.chrome_control.errors import CdpError, NavigationError, ScriptError, WaitTimeoutError

URL = "https://example.com/page"


def _page(conn: FakeConn) -> PageSession:
    return PageSession(conn, "T1")


def _current_url(expression: str) -> Any:
    return URL if expression == "window.location.href" else None


# ═══════════════════════════════════════════════════════════════════════════════
# JavaScript
# ═══════════════════════════════════════════════════════════════════════════════


def test_eval_js_returns_value_and_enables_runtime_once() -> None:
    conn = FakeConn(evaluate=lambda expr: 3)
    page = _page(conn)

    assert page.eval_js("1 + 2") == 3
    assert page.eval_js("1 + 2") == 3
    assert conn.methods().count("Runtime.enable") == 1
    params = conn.params_for("Runtime.evaluate")[0] or {}
    assert params["awaitPromise"] is True
    assert params["returnByValue"] is True


def test_eval_js_maps_null_to_none() -> None:
    conn = FakeConn(responses={"Runtime.evaluate": {"result": {"type": "object", "subtype": "null"}}})
    assert _page(conn).eval_js("null") is None


def test_eval_js_raises_script_error() -> None:
    conn = FakeConn(
        responses={
            "Runtime.evaluate": {
                "result": {"type": "object"},
                "exceptionDetails": {
                    "text": "Uncaught",
                    "exception": {"description": "ReferenceError: nope is not defined\n    at <anonymous>:1:1"},
                },
            }
        }
    )
    with pytest.raises(ScriptError) as excinfo:
        _page(conn).eval_js("nope")
    assert excinfo.value.message == "ReferenceError: nope is not defined"
    assert excinfo.value.kind == "script"


def test_call_function_serialises_arguments() -> None:
    conn = FakeConn(evaluate=lambda expr: 5)
    assert _page(conn).call_function("(a, b) => a + b", [2, "x"]) == 5
    expression = conn.params_for("Runtime.evaluate")[0]["expression"]  # type: ignore[index]
    assert expression == '((a, b) => a + b)(...[2, "x"])'


# ═══════════════════════════════════════════════════════════════════════════════
# Navigation
# ═══════════════════════════════════════════════════════════════════════════════


def test_navigate_waits_for_load_and_returns_url() -> None:
    conn = FakeConn(evaluate=_current_url, responses={"Page.navigate": {"frameId": "T1", "loaderId": "L1"}})
    conn.emit_after("Page.navigate", "Page.loadEventFired", {"timestamp": 1.0})
    page = _page(conn)

    assert page.navigate(URL) == URL
    assert page.url == URL
    assert "Page.enable" in conn.methods()
    assert conn.params_for("Page.navigate") == [{"url": URL}]


def test_navigate_ignores_stale_load_event() -> None:
    conn = FakeConn(evaluate=_current_url, responses={"Page.navigate": {"frameId": "T1", "loaderId": "L2"}})
    conn.events.append(("Page.loadEventFired", {"timestamp": 0.5}))

    with pytest.raises(WaitTimeoutError):
        _page(conn).navigate(URL, timeout=0.01)


def test_navigate_error_text_raises_navigation_error() -> None:
    conn = FakeConn(responses={"Page.navigate": {"frameId": "T1", "errorText": "net::ERR_NAME_NOT_RESOLVED"}})

    with pytest.raises(NavigationError) as excinfo:
        _page(conn).navigate("https://nope.invalid/")
    assert "net::ERR_NAME_NOT_RESOLVED" in excinfo.value.message
    assert excinfo.value.details == {"url": "https://nope.invalid/"}


def test_navigate_timeout_is_builtin_timeout_error() -> None:
    conn = FakeConn(responses={"Page.navigate": {"frameId": "T1", "loaderId": "L1"}})

    with pytest.raises(TimeoutError) as excinfo:
        _page(conn).navigate(URL, timeout=2.5)
    assert isinstance(excinfo.value, WaitTimeoutError)
    assert "2500 ms" in excinfo.value.message


def test_navigate_network_idle_matches_loader_and_frame() -> None:
    conn = FakeConn(evaluate=_current_url, responses={"Page.navigate": {"frameId": "T1", "loaderId": "L1"}})
    conn.emit_after("Page.navigate", "Page.lifecycleEvent", {"name": "networkIdle", "frameId": "child", "loaderId": "L1"})
    conn.emit_after("Page.navigate", "Page.lifecycleEvent", {"name": "networkIdle", "frameId": "T1", "loaderId": "L1"})

    assert _page(conn).navigate(URL, wait_until="networkidle0") == URL
    # The child-frame event is left unconsumed.
    assert conn.events == [("Page.lifecycleEvent", {"name": "networkIdle", "frameId": "child", "loaderId": "L1"})]


def test_same_document_navigation_does_not_wait() -> None:
    conn = FakeConn(evaluate=lambda expr: URL + "#top", responses={"Page.navigate": {"frameId": "T1"}})
    assert _page(conn).navigate(URL + "#top") == URL + "#top"


def test_unknown_wait_until_rejected() -> None:
    with pytest.raises(ValueError):
        _page(FakeConn()).wait_for_lifecycle("idle")


def test_go_back_without_history_returns_none() -> None:
    conn = FakeConn(
        responses={"Page.getNavigationHistory": {"currentIndex": 0, "entries": [{"id": 1, "url": URL}]}},
    )
    assert _page(conn).go_back() is None
    assert "Page.navigateToHistoryEntry" not in conn.methods()


def test_go_back_navigates_to_previous_entry() -> None:
    history = {
        "currentIndex": 1,
        "entries": [{"id": 10, "url": "https://example.com/"}, {"id": 11, "url": URL}],
    }
    conn = FakeConn(evaluate=lambda expr: "https://example.com/", responses={"Page.getNavigationHistory": history})
    conn.emit_after("Page.navigateToHistoryEntry", "Page.loadEventFired", {})

    assert _page(conn).go_back() == "https://example.com/"
    assert conn.params_for("Page.navigateToHistoryEntry") == [{"entryId": 10}]


def test_go_forward_between_fragments_does_not_wait() -> None:
    history = {"currentIndex": 0, "entries": [{"id": 1, "url": URL}, {"id": 2, "url": URL + "#b"}]}
    conn = FakeConn(evaluate=lambda expr: URL + "#b", responses={"Page.getNavigationHistory": history})

    assert _page(conn).go_forward() == URL + "#b"


def test_wait_for_navigation_uses_main_frame() -> None:
    conn = FakeConn(evaluate=_current_url)
    conn.events.append(("Page.frameNavigated", {"frame": {"id": "child", "parentId": "T1", "loaderId": "C"}}))
    conn.events.append(("Page.frameNavigated", {"frame": {"id": "T1", "loaderId": "L9"}}))
    conn.events.append(("Page.loadEventFired", {}))

    assert _page(conn).wait_for_navigation() == URL


def test_wait_for_navigation_times_out() -> None:
    with pytest.raises(WaitTimeoutError):
        _page(FakeConn()).wait_for_navigation(timeout=0.01)


# ═══════════════════════════════════════════════════════════════════════════════
# Selectors
# ═══════════════════════════════════════════════════════════════════════════════


def test_wait_for_selector_returns_when_present() -> None:
    states = iter(["missing", "missing", "ok"])
    conn = FakeConn(evaluate=lambda expr: next(states))

    _page(conn).wait_for_selector("#ready", timeout=5.0)
    assert len(conn.params_for("Runtime.evaluate")) == 3


def test_wait_for_selector_timeout_reports_hidden_state() -> None:
    conn = FakeConn(evaluate=lambda expr: "hidden")

    with pytest.raises(WaitTimeoutError) as excinfo:
        _page(conn).wait_for_selector("#modal", visible=True, timeout=0)
    assert "visible element `#modal`" in excinfo.value.message
    assert excinfo.value.details == {"selector": "#modal", "state": "hidden"}


def test_selector_is_json_quoted() -> None:
    conn = FakeConn(evaluate=lambda expr: "ok")
    _page(conn).wait_for_selector('a[title="x"]')
    expression = conn.params_for("Runtime.evaluate")[0]["expression"]  # type: ignore[index]
    assert 'document.querySelector("a[title=\\"x\\"]")' in expression


# ═══════════════════════════════════════════════════════════════════════════════
# Input
# ═══════════════════════════════════════════════════════════════════════════════


def test_click_dispatches_move_press_release() -> None:
    conn = FakeConn()
    _page(conn).click(10, 20)

    types = [p["type"] for p in conn.params_for("Input.dispatchMouseEvent")]  # type: ignore[index]
    assert types == ["mouseMoved", "mousePressed", "mouseReleased"]
    pressed = conn.params_for("Input.dispatchMouseEvent")[1]
    assert pressed == {"type": "mousePressed", "x": 10, "y": 20, "button": "left", "clickCount": 1}


def test_press_enter_sends_key_code_and_text() -> None:
    conn = FakeConn()
    _page(conn).press_key("Enter")

    down, up = conn.params_for("Input.dispatchKeyEvent")
    assert down == {"type": "keyDown", "key": "Enter", "code": "Enter", "windowsVirtualKeyCode": 13, "text": "\r"}
    assert up == {"type": "keyUp", "key": "Enter", "code": "Enter", "windowsVirtualKeyCode": 13}


def test_press_letter_key() -> None:
    conn = FakeConn()
    _page(conn).press_key("a")

    down = conn.params_for("Input.dispatchKeyEvent")[0]
    assert down == {"type": "keyDown", "key": "a", "code": "KeyA", "windowsVirtualKeyCode": 65, "text": "a"}


def test_type_text_without_delay_inserts_text() -> None:
    conn = FakeConn()
    _page(conn).type_text("hello")
    assert conn.params_for("Input.insertText") == [{"text": "hello"}]


def test_type_text_with_delay_sends_char_events() -> None:
    conn = FakeConn()
    _page(conn).type_text("ab", delay_ms=5)

    params = conn.params_for("Input.dispatchKeyEvent")
    assert params == [{"type": "char", "text": "a"}, {"type": "char", "text": "b"}]
    assert "Input.insertText" not in conn.methods()


# ═══════════════════════════════════════════════════════════════════════════════
# Capture, emulation & cookies
# ═══════════════════════════════════════════════════════════════════════════════


def test_screenshot_passes_quality_only_for_jpeg() -> None:
    conn = FakeConn(responses={"Page.captureScreenshot": {"data": "AAAA"}})
    page = _page(conn)

    assert page.screenshot("png", quality=50) == "AAAA"
    page.screenshot("jpeg", quality=50, clip={"x": 0, "y": 0, "width": 10, "height": 10, "scale": 1})

    png_params, jpeg_params = conn.params_for("Page.captureScreenshot")
    assert "quality" not in (png_params or {})
    assert jpeg_params["quality"] == 50  # type: ignore[index]
    assert jpeg_params["clip"]["width"] == 10  # type: ignore[index]


def test_screenshot_without_data_raises() -> None:
    conn = FakeConn(responses={"Page.captureScreenshot": {}})
    with pytest.raises(CdpError):
        _page(conn).screenshot()


def test_content_size_prefers_css_size() -> None:
    conn = FakeConn(
        responses={
            "Page.getLayoutMetrics": {
                "cssContentSize": {"width": 1280, "height": 4000},
                "contentSize": {"width": 2560, "height": 8000},
            }
        }
    )
    assert _page(conn).content_size() == (1280.0, 4000.0)


def test_get_cookies_defaults_to_current_url() -> None:
    conn = FakeConn(evaluate=_current_url, responses={"Network.getCookies": {"cookies": [{"name": "sid"}]}})

    assert _page(conn).get_cookies() == [{"name": "sid"}]
    assert conn.params_for("Network.getCookies") == [{"urls": [URL]}]
    assert "Network.enable" in conn.methods()


def test_set_cookie_defaults_url_when_no_domain() -> None:
    conn = FakeConn(evaluate=_current_url, responses={"Network.setCookie": {"success": True}})
    page = _page(conn)

    page.set_cookie({"name": "a", "value": "1"})
    page.set_cookie({"name": "b", "value": "2", "domain": ".example.com"})

    first, second = conn.params_for("Network.setCookie")
    assert first == {"name": "a", "value": "1", "url": URL}
    assert second == {"name": "b", "value": "2", "domain": ".example.com"}


def test_set_cookie_rejected_raises() -> None:
    conn = FakeConn(evaluate=_current_url, responses={"Network.setCookie": {"success": False}})
    with pytest.raises(CdpError):
        _page(conn).set_cookie({"name": "bad", "value": "x"})
