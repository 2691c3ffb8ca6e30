"""Animated layout transitions.

Targets come from any layout strategy; each frame moves every node from its
start to its target along an ease-out-cubic curve. One asyncio task drives
the frames of an animation. Starting a new animation over any of the same
nodes stops the running one after its current frame, so the callback always
sees a complete, consistent set of positions.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field

from meshflow.layout.config import AnimationConfig
from meshflow.layout.engine import LayoutEngine, LayoutStrategy
from meshflow.models import Edge, Node, Position

logger = logging.getLogger(__name__)

FrameCallback = Callable[[dict[str, Position]], Awaitable[None] | None]


def ease_out_cubic(progress: float) -> float:
    """1 - (1 - t)^3 with t clamped to [0, 1]."""
    t = min(max(progress, 0.0), 1.0)
    return 1.0 - (1.0 - t) ** 3


def interpolate_positions(
    start: Mapping[str, tuple[float, float]],
    target: Mapping[str, tuple[float, float]],
    elapsed: float,
    duration: float,
) -> dict[str, Position]:
    """
    Positions at ``elapsed`` into an animation of ``duration``.

    Exact start positions at elapsed <= 0, exact targets at elapsed >= duration.
    Nodes missing from ``start`` appear directly at their target.
    """
    if elapsed >= duration:
        return {node_id: Position(*pos) for node_id, pos in target.items()}
    if elapsed <= 0:
        return {
            node_id: Position(*start.get(node_id, pos))
            for node_id, pos in target.items()
        }

    eased = ease_out_cubic(elapsed / duration)
    frame: dict[str, Position] = {}
    for node_id, (tx, ty) in target.items():
        sx, sy = start.get(node_id, (tx, ty))
        frame[node_id] = Position(sx + (tx - sx) * eased, sy + (ty - sy) * eased)
    return frame


@dataclass
class _Animation:
    node_ids: frozenset[str]
    stop: asyncio.Event = field(default_factory=asyncio.Event)
    task: asyncio.Task | None = None


class LayoutAnimator:
    """Runs frame loops for animated layouts, at most one per node."""

    def __init__(self, config: AnimationConfig | None = None) -> None:
        self.config = config or AnimationConfig.from_settings()
        self._animations: list[_Animation] = []

    @property
    def is_animating(self) -> bool:
        return any(a.task is not None and not a.task.done() for a in self._animations)

    async def cancel(self, node_ids: Iterable[str] | None = None) -> int:
        """
        Stop running animations touching any of node_ids (all if None).

        Waits for each to finish its current frame.

        Returns:
            Number of animations stopped
        """
        wanted = None if node_ids is None else frozenset(node_ids)
        stopped = [
            a for a in self._animations
            if wanted is None or a.node_ids & wanted
        ]
        await self._stop(stopped)
        return len(stopped)

    @staticmethod
    async def _stop(animations: list[_Animation]) -> None:
        for animation in animations:
            animation.stop.set()
        for animation in animations:
            if animation.task is not None and animation.task is not asyncio.current_task():
                await asyncio.wait([animation.task])

    async def animate(
        self,
        start: Mapping[str, tuple[float, float]],
        target: Mapping[str, tuple[float, float]],
        on_frame: FrameCallback,
    ) -> bool:
        """
        Animate from start to target positions.

        Args:
            start: Last known positions
            target: Positions to reach
            on_frame: Called once per frame with every node's position

        Returns:
            True if the animation reached its targets, False if superseded
        """
        if not target:
            return True

        animation = _Animation(node_ids=frozenset(target))
        superseded = [a for a in self._animations if a.node_ids & animation.node_ids]
        # Registered before waiting, so a later call can supersede this one too
        self._animations.append(animation)
        try:
            await self._stop(superseded)
            animation.task = asyncio.create_task(
                self._run(animation, start, target, on_frame)
            )
            return await animation.task
        finally:
            self._animations.remove(animation)

    async def _run(
        self,
        animation: _Animation,
        start: Mapping[str, tuple[float, float]],
        target: Mapping[str, tuple[float, float]],
        on_frame: FrameCallback,
    ) -> bool:
        loop = asyncio.get_running_loop()
        duration = self.config.duration
        frame_interval = 1.0 / self.config.fps
        started = loop.time()
        frames = 0

        while True:
            if animation.stop.is_set():
                logger.debug(f"Animation superseded after {frames} frames")
                return False

            elapsed = loop.time() - started
            result = on_frame(
                interpolate_positions(start, target, elapsed, duration)
            )
            if inspect.isawaitable(result):
                await result
            frames += 1

            if elapsed >= duration:
                logger.debug(f"Animation finished after {frames} frames")
                return True
            await asyncio.sleep(frame_interval)


async def animate_layout(
    engine: LayoutEngine,
    animator: LayoutAnimator,
    strategy: LayoutStrategy | str,
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    on_frame: FrameCallback,
    **options: str | None,
) -> dict[str, Position]:
    """
    Compute a layout and animate nodes from their current positions to it.

    Returns:
        The target positions (whether or not the animation completed)
    """
    nodes = list(nodes)
    target = engine.compute(strategy, nodes, edges, **options)
    start = {node.id: (node.x, node.y) for node in nodes if node.has_position}
    await animator.animate(start, target, on_frame)
    return target
