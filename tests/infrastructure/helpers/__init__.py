"""Test helpers for the media acquisition test suite.

Assertion Helpers:
    assert_descriptor_layout - Check descriptor order (audio/camera/desktop)
    assert_all_released - Check streams and their tracks were stopped

Async Helpers:
    run_async - Run a coroutine to completion on a fresh event loop
"""

import asyncio
from typing import Any, Coroutine, TypeVar

from tests.infrastructure.helpers.assertions import (
    DescriptorLayoutError,
    assert_all_released,
    assert_descriptor_layout,
    descriptor_layout,
)

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously for testing."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


__all__ = [
    "DescriptorLayoutError",
    "assert_all_released",
    "assert_descriptor_layout",
    "descriptor_layout",
    "run_async",
]
