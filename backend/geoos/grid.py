"""
Spatial Grid Aggregator

Hexagonal demand cells keyed by H3 index.

Each cell keeps a trip count, the running mean of every speed sample folded
into it, and a wait-proxy count of low-speed samples. The running mean is
order-invariant: after N folds avg_speed equals the arithmetic mean of the
N samples regardless of arrival order.
"""

from dataclasses import dataclass
from typing import Dict, Iterable

from geoos.geo import cell_center


# Samples below this speed count towards the wait proxy
WAIT_SPEED_THRESHOLD = 5.0


@dataclass
class Cell:
    """
    Aggregated grid entry for one H3 cell

    Created lazily on the first folded point and never removed
    individually (only replaced with the whole grid).
    """
    cell_id: str
    trips: int = 0
    avg_speed: float = 0.0
    wait_proxy: int = 0

    def fold(self, speed: float, wait_threshold: float = WAIT_SPEED_THRESHOLD):
        """
        Fold one speed sample into the cell

        trips is incremented first, then
        avg_speed = (avg_speed * (trips - 1) + speed) / trips
        """
        self.trips += 1
        self.avg_speed = (self.avg_speed * (self.trips - 1) + speed) / self.trips
        if speed < wait_threshold:
            self.wait_proxy += 1

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses"""
        lat, lng = cell_center(self.cell_id)
        return {
            'h3': self.cell_id,
            'trips': self.trips,
            'avgSpd': round(self.avg_speed, 2),
            'wait': self.wait_proxy,
            'lat': lat,
            'lng': lng
        }


def fold_sample(
    cells: Dict[str, Cell],
    cell_id: str,
    speed: float,
    wait_threshold: float = WAIT_SPEED_THRESHOLD
) -> Cell:
    """
    Fold a speed sample into a cell map, creating the cell if needed

    Args:
        cells: Mutable cell_id -> Cell map being built
        cell_id: Target H3 cell
        speed: Speed sample
        wait_threshold: Wait-proxy speed threshold

    Returns:
        The updated Cell
    """
    cell = cells.get(cell_id)
    if cell is None:
        cell = Cell(cell_id=cell_id)
        cells[cell_id] = cell

    cell.fold(speed, wait_threshold)
    return cell


def build_cell(cell_id: str, speeds: Iterable[float], wait_threshold: float = WAIT_SPEED_THRESHOLD) -> Cell:
    """Build a cell from a sequence of speed samples"""
    cell = Cell(cell_id=cell_id)
    for speed in speeds:
        cell.fold(speed, wait_threshold)
    return cell
