"""Game client environment: the Chromium page the bot plays in."""

from hudbot.environment.browser import BrowserRuntime, BrowserRuntimeError

__all__ = ["BrowserRuntime", "BrowserRuntimeError"]
