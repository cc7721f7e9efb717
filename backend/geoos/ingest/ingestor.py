"""
Trajectory Ingestor

Turns a batch of raw GPS probes into per-vehicle trajectories and an H3
demand grid, then publishes both to the GridStore as one snapshot.

Algorithm:
1. Validate each probe (rejected rows are counted, not fatal)
2. Partition valid probes by vehicle id
3. Stable-sort each vehicle's probes by sequence number
4. Walk the sorted probes once: timestamp, H3 cell, distance and duration
5. Emit one Trajectory per vehicle
6. Fold every mapped point into the new cell map
7. Publish the snapshot (ingestion always replaces, never appends)
"""

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from geoos.geo import CELL_MAPPING_ERRORS, DEFAULT_H3_RESOLUTION, haversine_km, latlng_to_cell
from geoos.grid import Cell, WAIT_SPEED_THRESHOLD, fold_sample
from geoos.ingest.probe import RawProbe
from geoos.ingest.sequencing import SequencingPolicy, create_sequencing_policy
from geoos.ingest.validation import ProbeValidator, create_validator
from geoos.state import GridSnapshot, GridStore, Trajectory, TrajectoryPoint


@dataclass
class IngestResult:
    """Counts reported for one ingestion call"""
    rows_ingested: int = 0
    valid_rows: int = 0
    vehicles: int = 0
    zones_affected: int = 0
    total_grid_cells: int = 0
    filtered_errors: int = 0

    def to_dict(self) -> dict:
        return {
            'rows_ingested': self.rows_ingested,
            'valid_rows': self.valid_rows,
            'vehicles': self.vehicles,
            'zones_affected': self.zones_affected,
            'total_grid_cells': self.total_grid_cells,
            'filtered_errors': self.filtered_errors
        }


class TrajectoryIngestor:
    """
    Build trajectories and the demand grid from probe batches

    Usage:
        ingestor = TrajectoryIngestor(store, config)
        result = ingestor.ingest(probes)
    """

    def __init__(
        self,
        store: GridStore,
        config: dict = None,
        validator: Optional[ProbeValidator] = None,
        sequencing: Optional[SequencingPolicy] = None
    ):
        """
        Initialize the ingestor

        Args:
            store: GridStore to publish snapshots into
            config: Engine configuration ('grid' and 'ingest' sections)
            validator: Explicit validator (overrides config)
            sequencing: Explicit sequencing policy (overrides config)
        """
        config = config or {}
        grid_config = config.get('grid', {})
        ingest_config = config.get('ingest', {})

        self.store = store
        self.resolution = grid_config.get('h3Resolution', DEFAULT_H3_RESOLUTION)
        self.wait_threshold = grid_config.get('waitSpeedThreshold', WAIT_SPEED_THRESHOLD)
        self.validator = validator or create_validator(ingest_config)
        self.sequencing = sequencing or create_sequencing_policy(
            ingest_config.get('sequencing', 'synthetic')
        )

        # Statistics
        self.total_ingestions = 0
        self.last_result: Optional[IngestResult] = None

    def ingest(self, probes: Iterable[RawProbe]) -> IngestResult:
        """
        Replace the store contents with trajectories built from a batch

        Args:
            probes: Iterable of RawProbe records

        Returns:
            IngestResult with row, vehicle and cell counts
        """
        rows = 0
        invalid_rows = 0
        by_vehicle: Dict[str, List[RawProbe]] = OrderedDict()

        for probe in probes:
            rows += 1
            if not self.validator.is_valid(probe):
                invalid_rows += 1
                continue
            by_vehicle.setdefault(probe.vehicle_id, []).append(probe)

        print(f"[INGEST] Processed {rows} rows, found {len(by_vehicle)} trajectories, "
              f"skipped {invalid_rows} invalid rows")

        ingest_time = time.time()
        trajectories: Dict[str, Trajectory] = {}
        cells: Dict[str, Cell] = {}

        for vehicle_id, vehicle_probes in by_vehicle.items():
            trajectory = self._build_trajectory(vehicle_id, vehicle_probes, ingest_time)
            trajectories[vehicle_id] = trajectory

            for point in trajectory.points:
                if point.cell_id is None:
                    continue
                fold_sample(cells, point.cell_id, point.speed, self.wait_threshold)

        self.store.publish(GridSnapshot(
            trajectories=trajectories,
            cells=cells,
            last_update=time.time()
        ))

        result = IngestResult(
            rows_ingested=rows,
            valid_rows=rows - invalid_rows,
            vehicles=len(trajectories),
            zones_affected=len(set(cells.keys())),
            total_grid_cells=len(cells),
            filtered_errors=invalid_rows
        )

        self.total_ingestions += 1
        self.last_result = result

        print(f"[INGEST] H3 grid processing complete. Found {result.zones_affected} unique zones")
        return result

    def _build_trajectory(self, vehicle_id: str, probes: List[RawProbe], ingest_time: float) -> Trajectory:
        """Order one vehicle's probes and compute trajectory totals"""
        ordered = sorted(probes, key=lambda p: p.seq)

        points: List[TrajectoryPoint] = []
        total_distance = 0.0
        total_duration = 0.0
        total_speed = 0.0

        for i, probe in enumerate(ordered):
            timestamp = self.sequencing.timestamp_for(probe, i, ingest_time)
            point = TrajectoryPoint(
                lat=probe.lat,
                lng=probe.lng,
                speed=probe.speed,
                timestamp=timestamp,
                cell_id=self._map_cell(probe.lat, probe.lng),
                seq=probe.seq
            )

            if i > 0:
                prev = points[-1]
                total_distance += haversine_km(prev.lat, prev.lng, point.lat, point.lng)
                total_duration += point.timestamp - prev.timestamp

            total_speed += probe.speed
            points.append(point)

        avg_speed = total_speed / len(points) if points else 0.0

        return Trajectory(
            vehicle_id=vehicle_id,
            points=tuple(points),
            total_distance=total_distance,
            total_duration=total_duration,
            avg_speed=avg_speed
        )

    def _map_cell(self, lat: float, lng: float) -> Optional[str]:
        """H3 cell for a point, or None when the index cannot be computed"""
        try:
            return latlng_to_cell(lat, lng, self.resolution)
        except CELL_MAPPING_ERRORS as e:
            print(f"[WARN] Skipping point ({lat}, {lng}) for grid: {e}")
            return None
