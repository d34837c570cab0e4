"""Loading external sequences used to drive bound cells."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import torch


def load_sequence(path: str | Path) -> torch.Tensor:
    """Read whitespace separated numbers from ``path`` as a flat tensor.

    Parameters
    ----------
    path:
        Text file holding one or more numbers per line.

    Returns
    -------
    torch.Tensor
        1-D ``float32`` tensor in file order.
    """

    text = Path(path).read_text(encoding="utf-8")
    arr = np.array(text.split(), dtype=np.float32)
    if arr.size == 0:
        raise ValueError(f"no values found in {path}")
    return torch.from_numpy(arr)
