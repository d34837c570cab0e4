from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass
class LatticeConfig:
    # Cells above this value count as firing (decay path, co-activation)
    activation_threshold: float = 0.20
    decay_factor: float = 0.75
    weight_increase_factor: float = 1.02
    weight_decrease_factor: float = 0.99
    threshold_increase_factor: float = 1.01
    threshold_decrease_factor: float = 0.99
    max_weight: float = 1.0
    # Random seeding ranges: U[0, max)
    init_activation_max: float = 0.5
    init_threshold_max: float = 1.0
    init_weight_max: float = 1.0
    # Owned-slot weights written on a driver toggle (None leaves weights alone)
    toggle_weights: Optional[Tuple[float, float, float]] = (0.5, 0.75, 1.0)

    def __post_init__(self) -> None:
        if self.toggle_weights is not None:
            tw = tuple(float(w) for w in self.toggle_weights)
            if len(tw) != 3:
                raise ValueError("toggle_weights must hold one value per owned slot")
            self.toggle_weights = tw
