"""
Grid Store Module

Holds the reconstructed trajectories and the current H3 grid snapshot.

The store never exposes a half-built grid: the ingestor builds a complete
GridSnapshot off to the side and publishes it with a single reference swap.
Readers take one snapshot reference and compute against it without locking.

Usage:
    store = GridStore()
    store.publish(snapshot)

    snap = store.snapshot
    cells = snap.cells
"""

import copy
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from geoos.grid import Cell


@dataclass(frozen=True)
class TrajectoryPoint:
    """One ordered point of a reconstructed trajectory"""
    lat: float
    lng: float
    speed: float
    timestamp: float          # epoch seconds
    cell_id: Optional[str]    # None when cell mapping failed
    seq: float


@dataclass
class Trajectory:
    """
    One vehicle's ordered path for an ingested batch

    Totals are computed once at creation. Only anomaly_score is ever set
    afterwards, and only on copies made by the statistical detector.
    """
    vehicle_id: str
    points: Tuple[TrajectoryPoint, ...] = ()
    total_distance: float = 0.0   # km
    total_duration: float = 0.0   # seconds
    avg_speed: float = 0.0
    anomaly_score: Optional[float] = None

    def with_anomaly_score(self, score: float) -> 'Trajectory':
        """Return a copy carrying the given anomaly score"""
        return replace(self, anomaly_score=score)


@dataclass
class GridSnapshot:
    """
    Immutable-by-convention view of one ingestion

    Never mutated after publication; the simulator deep-copies cells
    before changing anything.
    """
    trajectories: Dict[str, Trajectory] = field(default_factory=dict)
    cells: Dict[str, Cell] = field(default_factory=dict)
    last_update: float = field(default_factory=time.time)

    def has_data(self) -> bool:
        return len(self.cells) > 0

    def copy_cells(self) -> Dict[str, Cell]:
        """Deep copy of the cell map, safe to mutate"""
        return copy.deepcopy(self.cells)


class GridStore:
    """
    Process-local owner of the live grid snapshot

    One instance per engine; pass it explicitly to every component that
    reads or publishes grid state.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._snapshot = GridSnapshot()
        self.total_publishes = 0

    @property
    def snapshot(self) -> GridSnapshot:
        """Current snapshot (a stable reference for the caller)"""
        return self._snapshot

    @property
    def trajectories(self) -> Dict[str, Trajectory]:
        return self._snapshot.trajectories

    @property
    def cells(self) -> Dict[str, Cell]:
        return self._snapshot.cells

    def publish(self, snapshot: GridSnapshot):
        """Atomically replace the live snapshot with a fully built one"""
        with self._lock:
            self._snapshot = snapshot
            self.total_publishes += 1

    def reset(self):
        """Clear trajectories and grid, stamping the update time"""
        self.publish(GridSnapshot(last_update=time.time()))
        print("[STATE] Grid store has been reset")

    def has_data(self) -> bool:
        return self._snapshot.has_data()

    def debug_state(self) -> dict:
        """Summary of the live snapshot for diagnostics"""
        snap = self._snapshot
        return {
            'gridSize': len(snap.cells),
            'trajectoriesSize': len(snap.trajectories),
            'lastUpdate': snap.last_update,
            'gridKeys': list(snap.cells.keys())[:5],
            'totalPublishes': self.total_publishes
        }

    def get_trajectories(self) -> List[Trajectory]:
        return list(self._snapshot.trajectories.values())
