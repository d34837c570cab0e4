"""Toroidal hex lattice of adaptive binary threshold units.

Each cell holds an activation and an adaptive threshold, and owns three edge
weights. ``HexGrid.step`` advances the whole lattice by one tick:

1. gate every cell on its weighted neighbour input (pre-step arrays),
   decaying cells that are already firing and nudging thresholds;
2. commit activations and thresholds;
3. overwrite bound cells with the next sample of their sequence;
4. strengthen edges whose endpoints are both firing, decay the rest;
5. commit weights.

The flat ``values`` (``width*height``), ``thresholds`` (``width*height``) and
``weights`` (``width*height*3``) tensors are row-major and are replaced, not
written into, by ``step``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import torch

from .config import LatticeConfig
from .wiring import (
    NBORS,
    OWNED_SLOTS,
    cell_index,
    neighbor_index_table,
    torus,
    weight_index,
)


def _check_dims(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be positive")


def _seed(
    values: Optional[Sequence[float] | torch.Tensor],
    n: int,
    scale: float,
    generator: Optional[torch.Generator],
    name: str,
) -> torch.Tensor:
    if values is None:
        return torch.rand(n, generator=generator, dtype=torch.float32) * scale
    t = torch.as_tensor(values, dtype=torch.float32).flatten().clone()
    if t.numel() != n:
        raise ValueError(f"{name} must have {n} elements, got {t.numel()}")
    return t


@dataclass
class Binding:
    """External sequence driving one cell, consumed round robin."""

    x: int
    y: int
    values: torch.Tensor
    cursor: int = 0

    def next(self) -> float:
        v = float(self.values[self.cursor])
        self.cursor += 1
        if self.cursor >= self.values.numel():
            self.cursor = 0
        return v


class HexGrid:
    """Hebbian hex lattice on a ``width x height`` torus.

    Parameters
    ----------
    width, height:
        Lattice size, both positive.
    cfg:
        Rule constants and seeding ranges.
    activation, threshold, weight:
        Optional initial arrays. Missing ones are drawn uniformly from
        ``[0, cfg.init_*_max)``.
    generator:
        Optional ``torch.Generator`` for reproducible random seeding.
    """

    def __init__(
        self,
        width: int,
        height: int,
        cfg: Optional[LatticeConfig] = None,
        *,
        activation: Optional[Sequence[float] | torch.Tensor] = None,
        threshold: Optional[Sequence[float] | torch.Tensor] = None,
        weight: Optional[Sequence[float] | torch.Tensor] = None,
        generator: Optional[torch.Generator] = None,
    ):
        _check_dims(width, height)
        self.width = width
        self.height = height
        self.cfg = cfg if cfg is not None else LatticeConfig()
        n = width * height
        self.values = _seed(
            activation, n, self.cfg.init_activation_max, generator, "activation"
        )
        self.thresholds = _seed(
            threshold, n, self.cfg.init_threshold_max, generator, "threshold"
        )
        self.weights = _seed(
            weight, n * OWNED_SLOTS, self.cfg.init_weight_max, generator, "weight"
        )
        self._nbr_cells, self._nbr_weights = neighbor_index_table(width, height)
        self.binds: List[Binding] = []
        self.global_step = 0

    @classmethod
    def uniform(
        cls,
        width: int,
        height: int,
        activation: float = 0.0,
        threshold: float = 0.5,
        weight: float = 0.5,
        cfg: Optional[LatticeConfig] = None,
    ) -> "HexGrid":
        """Lattice with every cell and weight slot set to a constant."""

        _check_dims(width, height)
        n = width * height
        return cls(
            width,
            height,
            cfg,
            activation=torch.full((n,), activation, dtype=torch.float32),
            threshold=torch.full((n,), threshold, dtype=torch.float32),
            weight=torch.full((n * OWNED_SLOTS,), weight, dtype=torch.float32),
        )

    # ------------------------------------------------------------------
    # Accessors. Coordinates wrap; these write the live arrays directly.

    def _idx(self, x: int, y: int) -> int:
        return cell_index(x, y, self.width, self.height)

    def _widx(self, x: int, y: int, slot: int) -> int:
        if not 0 <= slot < OWNED_SLOTS:
            raise IndexError(f"weight slot must be in [0, {OWNED_SLOTS}), got {slot}")
        return weight_index(x, y, slot, self.width, self.height)

    def get(self, x: int, y: int) -> float:
        return float(self.values[self._idx(x, y)])

    def set(self, x: int, y: int, v: float) -> None:
        self.values[self._idx(x, y)] = v

    def get_weight(self, x: int, y: int, slot: int) -> float:
        return float(self.weights[self._widx(x, y, slot)])

    def set_weight(self, x: int, y: int, slot: int, v: float) -> None:
        self.weights[self._widx(x, y, slot)] = v

    def get_threshold(self, x: int, y: int) -> float:
        return float(self.thresholds[self._idx(x, y)])

    def set_threshold(self, x: int, y: int, v: float) -> None:
        self.thresholds[self._idx(x, y)] = v

    def contact_weights(self, x: int, y: int) -> List[float]:
        """The six weights incident to ``(x, y)`` in ``NBORS`` order."""

        return [self.get_weight(x + n.wx, y + n.wy, n.slot) for n in NBORS]

    # ------------------------------------------------------------------
    # Activation gate

    def _weighted_sums(
        self, values: torch.Tensor, weights: torch.Tensor
    ) -> torch.Tensor:
        # Accumulate offset by offset so every cell sums in table order
        acc = torch.zeros_like(values)
        for k in range(len(NBORS)):
            acc = acc + values[self._nbr_cells[k]] * weights[self._nbr_weights[k]]
        return acc

    def weighted_sum(self, x: int, y: int) -> float:
        """Neighbour input of ``(x, y)`` before thresholding."""

        i = self._idx(x, y)
        acc = torch.zeros((), dtype=self.values.dtype)
        for k in range(len(NBORS)):
            acc = acc + (
                self.values[self._nbr_cells[k, i]]
                * self.weights[self._nbr_weights[k, i]]
            )
        return float(acc)

    def activation(self, x: int, y: int) -> float:
        """Binary gate: ``1.0`` if the neighbour input reaches the threshold."""

        if self.weighted_sum(x, y) < self.get_threshold(x, y):
            return 0.0
        return 1.0

    def activations(self) -> torch.Tensor:
        """Gate outputs for every cell, computed from the live arrays."""

        sums = self._weighted_sums(self.values, self.weights)
        return (sums >= self.thresholds).to(self.values.dtype)

    # ------------------------------------------------------------------
    # Bindings

    @property
    def bindings(self) -> List[Binding]:
        return list(self.binds)

    def bind(self, x: int, y: int, values: Sequence[float] | torch.Tensor) -> Binding:
        """Drive ``(x, y)`` from ``values`` after every step.

        ``values[0]`` is written immediately; each following ``step`` writes
        the next sample, wrapping to the start. Rebinding a cell replaces its
        binding in place.
        """

        vals = torch.as_tensor(values, dtype=torch.float32).flatten().clone()
        if vals.numel() == 0:
            raise ValueError("binding sequence must not be empty")
        x, y = torus(x, self.width), torus(y, self.height)
        b = Binding(x, y, vals, cursor=1 % vals.numel())
        for i, old in enumerate(self.binds):
            if old.x == x and old.y == y:
                self.binds[i] = b
                break
        else:
            self.binds.append(b)
        self.set(x, y, float(vals[0]))
        return b

    def unbind(self, x: int, y: int) -> bool:
        x, y = torus(x, self.width), torus(y, self.height)
        for i, b in enumerate(self.binds):
            if b.x == x and b.y == y:
                del self.binds[i]
                return True
        return False

    # ------------------------------------------------------------------
    # Update

    def _adapt_weights(
        self, values: torch.Tensor, weights: torch.Tensor
    ) -> torch.Tensor:
        cfg = self.cfg
        hot = values > cfg.activation_threshold
        w = weights.view(-1, OWNED_SLOTS)
        nxt = torch.empty_like(w)
        # Owned slot k joins the cell to its neighbour along NBORS[k]
        for k in range(OWNED_SLOTS):
            co = hot & hot[self._nbr_cells[k]]
            up = (w[:, k] * cfg.weight_increase_factor).clamp_max(cfg.max_weight)
            nxt[:, k] = torch.where(co, up, w[:, k] * cfg.weight_decrease_factor)
        return nxt.view(-1)

    def step(self) -> None:
        cfg = self.cfg
        v = self.values
        t = self.thresholds
        a = self.activations()

        firing = v > cfg.activation_threshold
        next_v = torch.where(firing, v * cfg.decay_factor, a)
        # Firing cells that would fire again from input get harder to trigger
        next_t = torch.where(
            firing & (a == 1.0),
            t * cfg.threshold_increase_factor,
            t * cfg.threshold_decrease_factor,
        )
        self.values = next_v
        self.thresholds = next_t

        for b in self.binds:
            self.values[self._idx(b.x, b.y)] = b.next()

        self.weights = self._adapt_weights(self.values, self.weights)
        self.global_step += 1

    def telemetry(self) -> dict:
        """Summary statistics of the current lattice state."""

        hot = self.values > self.cfg.activation_threshold
        return {
            "step": self.global_step,
            "active_fraction": float(hot.float().mean()),
            "activation_mean": float(self.values.mean()),
            "threshold_mean": float(self.thresholds.mean()),
            "weight_mean": float(self.weights.mean()),
            "weight_min": float(self.weights.min()),
            "weight_max": float(self.weights.max()),
            "bindings": len(self.binds),
        }
