"""Headless frame driver for ``HexGrid``.

User input (already translated into lattice coordinates) is posted as events
and consumed once per frame by ``process_frame``. Toggles and binds are
applied in arrival order; any number of step requests within one frame
collapse into a single ``HexGrid.step``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Sequence, Union

import torch

from .lattice import HexGrid


@dataclass(frozen=True)
class Toggle:
    x: int
    y: int


@dataclass(frozen=True)
class Bind:
    x: int
    y: int
    values: Sequence[float] | torch.Tensor


@dataclass(frozen=True)
class StepRequest:
    pass


Event = Union[Toggle, Bind, StepRequest]


@dataclass
class Frame:
    """Display-side copy of the lattice arrays."""

    values: torch.Tensor
    weights: torch.Tensor
    step: int
    changed: bool


class LatticeDriver:
    def __init__(self, grid: HexGrid):
        self.grid = grid
        self.queue: Deque[Event] = deque()

    def post(self, event: Event) -> None:
        self.queue.append(event)

    def toggle(self, x: int, y: int) -> None:
        """Flip ``(x, y)`` between 0 and 1 and reset its owned weights."""

        g = self.grid
        g.set(x, y, 1.0 - g.get(x, y))
        tw = g.cfg.toggle_weights
        if tw is not None:
            for slot, w in enumerate(tw):
                g.set_weight(x, y, slot, w)

    def frame(self, changed: bool = False) -> Frame:
        return Frame(
            values=self.grid.values.clone(),
            weights=self.grid.weights.clone(),
            step=self.grid.global_step,
            changed=changed,
        )

    def process_frame(self) -> Frame:
        changed = False
        step_requested = False
        while self.queue:
            event = self.queue.popleft()
            if isinstance(event, Toggle):
                self.toggle(event.x, event.y)
                changed = True
            elif isinstance(event, Bind):
                self.grid.bind(event.x, event.y, event.values)
                changed = True
            elif isinstance(event, StepRequest):
                step_requested = True
            else:
                raise TypeError(f"unknown event {event!r}")
        if step_requested:
            self.grid.step()
            changed = True
        return self.frame(changed)
