import argparse
import random
from dataclasses import dataclass, field
from typing import List, Tuple

import torch

from hexgrid import (
    Bind,
    HexGrid,
    LatticeConfig,
    LatticeDriver,
    StepRequest,
    Toggle,
    load_sequence,
)


@dataclass
class SimHyperParams:
    """Knobs controlling the headless lattice demo."""

    rows: int = 20
    cols: int = 20
    steps: int = 100
    log_interval: int = 10
    seed: int | None = None
    activation_threshold: float = 0.20
    binds: List[Tuple[int, int, str]] = field(default_factory=list)
    toggles: List[Tuple[int, int]] = field(default_factory=list)


def build_grid(hparams: SimHyperParams) -> HexGrid:
    cfg = LatticeConfig(activation_threshold=hparams.activation_threshold)
    gen = None
    if hparams.seed is not None:
        gen = torch.Generator().manual_seed(hparams.seed)
    return HexGrid(hparams.cols, hparams.rows, cfg, generator=gen)


def run(grid: HexGrid, hparams: SimHyperParams) -> LatticeDriver:
    driver = LatticeDriver(grid)
    for x, y, path in hparams.binds:
        driver.post(Bind(x, y, load_sequence(path)))
    for x, y in hparams.toggles:
        driver.post(Toggle(x, y))
    driver.process_frame()

    header = "step,active,act_mean,thr_mean,w_mean,w_min,w_max"
    print(header)
    for _ in range(hparams.steps):
        driver.post(StepRequest())
        frame = driver.process_frame()
        if hparams.log_interval and frame.step % hparams.log_interval == 0:
            telem = grid.telemetry()
            line = (
                f"{telem['step']},{telem['active_fraction']:.4f},"
                f"{telem['activation_mean']:.4f},{telem['threshold_mean']:.4f},"
                f"{telem['weight_mean']:.4f},{telem['weight_min']:.4f},"
                f"{telem['weight_max']:.4f}"
            )
            print(line)
    return driver


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--rows", type=int, default=20, help="Number of rows in the grid"
    )
    parser.add_argument(
        "--cols", type=int, default=20, help="Number of columns in the grid"
    )
    parser.add_argument("--steps", type=int, default=100, help="Steps to simulate")
    parser.add_argument(
        "--log-interval",
        type=int,
        default=10,
        help="Steps between telemetry lines (0 disables)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: random)",
    )
    parser.add_argument(
        "--activation-threshold",
        type=float,
        default=0.20,
        help="Activation above which a cell counts as firing",
    )
    parser.add_argument(
        "--bind",
        nargs=3,
        action="append",
        default=[],
        metavar=("X", "Y", "PATH"),
        help="Drive cell (X, Y) from the numbers in PATH (repeatable)",
    )
    parser.add_argument(
        "--toggle",
        nargs=2,
        type=int,
        action="append",
        default=[],
        metavar=("X", "Y"),
        help="Toggle cell (X, Y) before the first step (repeatable)",
    )
    args = parser.parse_args()
    seed = args.seed if args.seed is not None else random.randrange(2**32)
    random.seed(seed)
    torch.manual_seed(seed)
    hparams = SimHyperParams(
        rows=args.rows,
        cols=args.cols,
        steps=args.steps,
        log_interval=args.log_interval,
        seed=seed,
        activation_threshold=args.activation_threshold,
        binds=[(int(x), int(y), path) for x, y, path in args.bind],
        toggles=[(x, y) for x, y in args.toggle],
    )
    grid = build_grid(hparams)
    print(f"lattice: {grid.width}x{grid.height} cells, {grid.weights.numel()} edges")
    print(f"using seed {seed}")
    run(grid, hparams)


if __name__ == "__main__":
    main()
