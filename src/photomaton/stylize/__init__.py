"""
Stylize Module
==============

Remote restyling of single frames.

This module treats the generative-image API as a black box behind one
operation, `stylize(frame, instruction) -> StyleResult`:
    - StylizeClient: Protocol every backend implements
    - GeminiStylizeClient: Direct calls with a caller-held key
    - ProxyStylizeClient: Calls through the trusted proxy
    - MockStylizeClient: Deterministic offline backend

Example:
    from photomaton.config import settings
    from photomaton.stylize import create_stylize_client

    client = create_stylize_client(settings)
    result = await client.stylize(frame, "Make it snow")
"""

import logging

from photomaton.config import Settings
from photomaton.stylize.client import (
    GeminiStylizeClient,
    ProxyStylizeClient,
    StylizeClient,
    build_style_prompt,
    parse_generate_content,
)
from photomaton.stylize.mock import MockStylizeClient


logger = logging.getLogger(__name__)


def create_stylize_client(settings: Settings) -> StylizeClient:
    """
    Create the stylize backend selected in config.

    A direct backend without a key is still created; the missing credential
    surfaces as AuthError on the first call, before any request is sent.

    Raises:
        ValueError: For an unknown backend name
    """
    config = settings.stylize
    backend = config.backend

    if backend == "gemini":
        logger.info(f"Using GeminiStylizeClient: model={config.model}")
        if not config.api_key:
            logger.warning("No API key configured; stylize calls will be rejected")
        return GeminiStylizeClient(
            api_key=config.api_key,
            model=config.model,
            api_base_url=config.api_base_url,
            timeout_seconds=config.timeout_seconds,
        )

    elif backend == "proxy":
        logger.info(f"Using ProxyStylizeClient: {config.proxy_url}")
        return ProxyStylizeClient(
            proxy_url=config.proxy_url,
            timeout_seconds=config.timeout_seconds,
        )

    elif backend == "mock":
        logger.info("Using MockStylizeClient")
        return MockStylizeClient()

    else:
        raise ValueError(f"Unknown stylize backend: {backend}")


__all__ = [
    "GeminiStylizeClient",
    "MockStylizeClient",
    "ProxyStylizeClient",
    "StylizeClient",
    "build_style_prompt",
    "create_stylize_client",
    "parse_generate_content",
]
