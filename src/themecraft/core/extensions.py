"""
Extension hooks for the asynchronous build path.

An extension is a named pair of optional hooks called before and after a
theme is composed. Each hook receives a copy of the in-progress theme and may
return a partial theme patch, which is deep-merged back. Hooks run one after
another in priority order, each bounded by a timeout. A hook that raises or
times out is logged and its contribution discarded; it never aborts a build.

Usage:
    def brand_ring(ctx: ExtensionContext) -> dict:
        return {"colors": {"ring": "#ff00aa"}}

    builder = ThemeBuilder().with_extension(
        ThemeExtension(name="brand-ring", before_build=brand_ring)
    )
    theme = await builder.build()
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .composition import deep_merge
from .ir.theme import BuiltTheme, ThemeVariant

logger = logging.getLogger(__name__)


class ExtensionPriority(StrEnum):
    """Ordering of extensions within a phase."""

    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


_PRIORITY_ORDER: dict[ExtensionPriority, int] = {
    ExtensionPriority.CRITICAL: 0,
    ExtensionPriority.HIGH: 1,
    ExtensionPriority.NORMAL: 2,
    ExtensionPriority.LOW: 3,
}


class HookPhase(StrEnum):
    BEFORE_BUILD = "beforeBuild"
    AFTER_BUILD = "afterBuild"


@dataclass(frozen=True)
class ExtensionContext:
    """What a hook can see: a private copy of the working theme."""

    theme: dict[str, Any]
    phase: HookPhase
    variant: ThemeVariant = ThemeVariant.DEFAULT
    output_variables: dict[str, str] | None = None


HookResult = Mapping[str, Any] | BuiltTheme | None
Hook = Callable[[ExtensionContext], HookResult | Awaitable[HookResult]]


@dataclass(frozen=True)
class ThemeExtension:
    """A named set of build hooks."""

    name: str
    before_build: Hook | None = None
    after_build: Hook | None = None
    priority: ExtensionPriority = ExtensionPriority.NORMAL
    version: str = "1.0.0"
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)

    def hook_for(self, phase: HookPhase) -> Hook | None:
        return self.before_build if phase == HookPhase.BEFORE_BUILD else self.after_build


def sort_extensions(extensions: Iterable[ThemeExtension]) -> list[ThemeExtension]:
    """Priority order; registration order is kept within a priority."""
    return sorted(extensions, key=lambda ext: _PRIORITY_ORDER[ExtensionPriority(ext.priority)])


def _normalize_patch(extension: ThemeExtension, patch: Any) -> dict[str, Any] | None:
    if patch is None:
        return None
    if isinstance(patch, BuiltTheme):
        return patch.to_tokens()
    if isinstance(patch, Mapping):
        return copy.deepcopy(dict(patch))
    logger.warning(
        f"Extension '{extension.name}' returned {type(patch).__name__}; expected a theme patch"
    )
    return None


async def run_hook(
    extension: ThemeExtension,
    phase: HookPhase,
    context: ExtensionContext,
    timeout: float,
) -> dict[str, Any] | None:
    """Run one hook with a timeout.

    Coroutine hooks are awaited directly; plain callables run in a worker
    thread so the timeout applies to them too.

    A timed-out coroutine hook is cancelled. A timed-out plain hook cannot be
    interrupted: the build moves on without its patch, but the thread keeps
    running to completion, and the event loop's executor waits for it on
    shutdown. Hooks that may block for long should be coroutines.

    Returns:
        The hook's theme patch, or None if it returned nothing, raised,
        or timed out.
    """
    hook = extension.hook_for(phase)
    if hook is None:
        return None

    logger.debug(f"Running {phase} hook of extension '{extension.name}'")
    try:
        if inspect.iscoroutinefunction(hook):
            patch = await asyncio.wait_for(hook(context), timeout=timeout)
        else:
            patch = await asyncio.wait_for(asyncio.to_thread(hook, context), timeout=timeout)
            if inspect.isawaitable(patch):
                patch = await asyncio.wait_for(patch, timeout=timeout)
    except TimeoutError:
        logger.warning(f"Extension '{extension.name}' {phase} hook timed out after {timeout}s")
        return None
    except Exception as e:
        logger.warning(f"Extension '{extension.name}' {phase} hook failed: {e}", exc_info=True)
        return None

    return _normalize_patch(extension, patch)


async def run_extension_hooks(
    extensions: Iterable[ThemeExtension],
    phase: HookPhase,
    theme: dict[str, Any],
    *,
    timeout: float,
    variant: ThemeVariant = ThemeVariant.DEFAULT,
    output_variables: dict[str, str] | None = None,
) -> dict[str, Any]:
    """Run every extension's hook for ``phase`` sequentially.

    Args:
        extensions: Registered extensions.
        phase: Which hook to call.
        theme: Working theme tokens (not mutated).
        timeout: Seconds allowed per hook.
        variant: Variant being built, exposed to hooks.
        output_variables: Flattened variables, exposed to after-build hooks.

    Returns:
        The theme with every successful patch merged in.
    """
    result = copy.deepcopy(theme)
    for extension in sort_extensions(extensions):
        context = ExtensionContext(
            theme=copy.deepcopy(result),
            phase=phase,
            variant=variant,
            output_variables=dict(output_variables) if output_variables is not None else None,
        )
        patch = await run_hook(extension, phase, context, timeout)
        if patch:
            result = deep_merge(result, patch)
    return result
