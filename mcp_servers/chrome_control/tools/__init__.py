"""
Chrome control tools organized by domain.

Each module provides focused functionality on top of the session controller:
- base: page acquisition, timeouts, element lookup
- browser: launch, close, viewport
- navigation: page navigation and history
- input: click, type, keys, scrolling
- page: content, elements, scripts, waits
- screenshot: size-bounded captures
- cookies: cookie operations
"""

from .browser import close_browser, launch_browser, set_viewport
from .cookies import get_cookies, set_cookie
from .input import click_element, press_key, scroll, type_into
from .navigation import go_back, go_forward, navigate_to, reload_page, wait_for_navigation
from .page import execute_script, get_content, get_elements, get_title, get_url, wait_for_selector
from .screenshot import screenshot_summary, take_screenshot

__all__ = [
    "click_element",
    "close_browser",
    "execute_script",
    "get_content",
    "get_cookies",
    "get_elements",
    "get_title",
    "get_url",
    "go_back",
    "go_forward",
    "launch_browser",
    "navigate_to",
    "press_key",
    "reload_page",
    "screenshot_summary",
    "scroll",
    "set_cookie",
    "set_viewport",
    "take_screenshot",
    "type_into",
    "wait_for_navigation",
    "wait_for_selector",
]
