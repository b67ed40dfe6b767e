from __future__ import annotations

import pytest

from mcp_servers.chrome_control.errors import ValidationError
from mcp_servers.chrome_control.server.definitions import TOOLS_BY_NAME
from mcp_servers.chrome_control.server.validation import validate_arguments


def _validate(name: str, args: dict | None) -> dict:
    return validate_arguments(TOOLS_BY_NAME[name], args)


def test_defaults_are_filled() -> None:
    args = _validate("chrome_screenshot", {})
    assert args == {
        "full_page": False,
        "format": "jpeg",
        "quality": 60,
        "max_width": 1280,
        "max_height": 1440,
    }


def test_optional_without_default_is_omitted() -> None:
    args = _validate("chrome_launch", None)
    assert "headless" not in args
    assert (args["width"], args["height"]) == (1280, 720)


def test_mutable_defaults_are_copied() -> None:
    first = _validate("chrome_execute_script", {"script": "() => 1"})
    first["args"].append(1)
    second = _validate("chrome_execute_script", {"script": "() => 1"})
    assert second["args"] == []


def test_missing_required_argument() -> None:
    with pytest.raises(ValidationError, match="missing required argument"):
        _validate("chrome_type", {"selector": "#q"})


def test_unknown_argument_rejected() -> None:
    with pytest.raises(ValidationError, match="unknown argument"):
        _validate("chrome_get_title", {"verbose": True})


@pytest.mark.parametrize(
    ("name", "args"),
    [
        ("chrome_screenshot", {"quality": 101}),
        ("chrome_screenshot", {"max_width": 99}),
        ("chrome_launch", {"width": 8000}),
        ("chrome_click", {"selector": "a", "timeout": 120001}),
        ("chrome_press_key", {"key": "a", "delay": 1001}),
        ("chrome_set_viewport", {"width": 800, "height": 600, "device_scale_factor": 0}),
    ],
)
def test_range_limits(name: str, args: dict) -> None:
    with pytest.raises(ValidationError):
        _validate(name, args)


def test_enum_rejected() -> None:
    with pytest.raises(ValidationError, match="must be one of"):
        _validate("chrome_navigate", {"url": "https://a.test/", "wait_until": "idle"})


def test_empty_selector_rejected() -> None:
    with pytest.raises(ValidationError, match="must not be empty"):
        _validate("chrome_click", {"selector": ""})


def test_bool_is_not_an_integer() -> None:
    with pytest.raises(ValidationError, match="expected integer"):
        _validate("chrome_scroll", {"y": True})


def test_integral_float_is_coerced() -> None:
    args = _validate("chrome_scroll", {"x": 0, "y": 500.0})
    assert args["y"] == 500
    assert isinstance(args["y"], int)


def test_array_items_checked() -> None:
    with pytest.raises(ValidationError, match=r"urls\[1\]"):
        _validate("chrome_get_cookies", {"urls": ["https://a.test/", 5]})


def test_zero_timeout_accepted() -> None:
    assert _validate("chrome_wait_for_selector", {"selector": "#x", "timeout": 0})["timeout"] == 0


def test_non_object_arguments_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_arguments(TOOLS_BY_NAME["chrome_get_url"], ["nope"])  # type: ignore[arg-type]
