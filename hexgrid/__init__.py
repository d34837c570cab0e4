from .config import LatticeConfig as LatticeConfig
from .lattice import Binding as Binding, HexGrid as HexGrid
from .wiring import (
    NBORS as NBORS,
    HexOffset as HexOffset,
    torus as torus,
    hex_neighbors as hex_neighbors,
    neighbor_index_table as neighbor_index_table,
    owned_edges as owned_edges,
)
from .driver import (
    Bind as Bind,
    Frame as Frame,
    LatticeDriver as LatticeDriver,
    StepRequest as StepRequest,
    Toggle as Toggle,
)
from .data import load_sequence as load_sequence
