"""Toroidal hex-lattice wiring.

Cells live on a ``width x height`` torus. Every cell touches six neighbours
but owns only three of the six incident edges (slots 0, 1, 2); the other three
weights are read from the neighbour that owns them. ``NBORS`` is the single
table used both for summing neighbour input and for adapting weights.
"""

from typing import List, NamedTuple, Tuple

import torch


class HexOffset(NamedTuple):
    dx: int  # neighbour offset
    dy: int
    wx: int  # offset of the cell owning the edge weight
    wy: int
    slot: int


# The weight from (x, y) to (x+dx, y+dy) sits in slot ``slot`` of (x+wx, y+wy).
# The first three entries are the edges a cell owns itself.
NBORS: Tuple[HexOffset, ...] = (
    HexOffset(-1, 1, 0, 0, 0),
    HexOffset(0, 1, 0, 0, 1),
    HexOffset(1, 0, 0, 0, 2),
    HexOffset(-1, 0, -1, 0, 2),
    HexOffset(0, -1, 0, -1, 1),
    HexOffset(1, -1, 1, -1, 0),
)

OWNED_SLOTS = 3


def torus(c: int, n: int) -> int:
    return (c % n + n) % n


def cell_index(x: int, y: int, width: int, height: int) -> int:
    """Flat row-major index of ``(x, y)`` after wrapping both axes."""

    return torus(y, height) * width + torus(x, width)


def weight_index(x: int, y: int, slot: int, width: int, height: int) -> int:
    """Flat index of weight ``slot`` owned by ``(x, y)``."""

    return cell_index(x, y, width, height) * OWNED_SLOTS + slot


def hex_neighbors(width: int, height: int) -> List[List[int]]:
    """Six neighbour indices per cell, in ``NBORS`` order."""

    cells, _ = neighbor_index_table(width, height)
    return cells.t().tolist()


def neighbor_index_table(width: int, height: int) -> Tuple[torch.Tensor, torch.Tensor]:
    """Gather indices for vectorised neighbour sums.

    Returns ``(cells, weights)``, two ``(6, width*height)`` long tensors.
    ``cells[k, i]`` is the flat index of cell ``i``'s neighbour along
    ``NBORS[k]`` and ``weights[k, i]`` the flat index of the weight on that
    edge.
    """

    ys, xs = torch.meshgrid(torch.arange(height), torch.arange(width), indexing="ij")
    xs = xs.reshape(-1)
    ys = ys.reshape(-1)

    def wrapped(dx: int, dy: int) -> torch.Tensor:
        return (
            torch.remainder(ys + dy, height) * width
            + torch.remainder(xs + dx, width)
        )

    cells = torch.stack([wrapped(n.dx, n.dy) for n in NBORS])
    weights = torch.stack([wrapped(n.wx, n.wy) * OWNED_SLOTS + n.slot for n in NBORS])
    return cells, weights


def owned_edges(width: int, height: int) -> List[Tuple[int, int, int]]:
    """Enumerate ``(cell, neighbour, weight_index)`` for every owned slot."""

    edges: List[Tuple[int, int, int]] = []
    for y in range(height):
        for x in range(width):
            i = y * width + x
            for slot, n in enumerate(NBORS[:OWNED_SLOTS]):
                j = cell_index(x + n.dx, y + n.dy, width, height)
                edges.append((i, j, i * OWNED_SLOTS + slot))
    return edges
