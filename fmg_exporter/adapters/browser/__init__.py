"""
Playwright-backed browser session, page loader and in-page access.
"""

from .generation_session import PlaywrightGenerationSession
from .loader import GenerationPageLoader, build_generator_url
from .session_manager import BrowserSessionManager

__all__ = ["BrowserSessionManager", "GenerationPageLoader", "PlaywrightGenerationSession", "build_generator_url"]
