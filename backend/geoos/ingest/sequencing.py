"""
Sequencing Policies

Assign timestamps to the ordered points of a trajectory.

Probe feeds such as the anonymized sample export carry no real timestamps,
so the default policy fabricates one second per point starting at ingestion
time. Sources with recorded timestamps can switch to RecordedTimestampPolicy.
"""

from typing import Optional

from geoos.ingest.probe import RawProbe


class SequencingPolicy:
    """Base class: map (probe, index) to an epoch-seconds timestamp"""

    name = 'base'

    def timestamp_for(self, probe: RawProbe, index: int, ingest_time: float) -> float:
        raise NotImplementedError


class SyntheticTimestampPolicy(SequencingPolicy):
    """ingest_time + index * step seconds"""

    name = 'synthetic'

    def __init__(self, step_seconds: float = 1.0):
        self.step_seconds = step_seconds

    def timestamp_for(self, probe: RawProbe, index: int, ingest_time: float) -> float:
        return ingest_time + index * self.step_seconds


class RecordedTimestampPolicy(SequencingPolicy):
    """Use the probe's recorded timestamp, falling back to synthetic spacing"""

    name = 'recorded'

    def __init__(self, fallback: Optional[SequencingPolicy] = None):
        self.fallback = fallback or SyntheticTimestampPolicy()

    def timestamp_for(self, probe: RawProbe, index: int, ingest_time: float) -> float:
        if probe.timestamp is not None:
            return probe.timestamp
        return self.fallback.timestamp_for(probe, index, ingest_time)


def create_sequencing_policy(name: str = 'synthetic') -> SequencingPolicy:
    """Create a sequencing policy by config name"""
    if name == 'recorded':
        return RecordedTimestampPolicy()
    if name != 'synthetic':
        print(f"[WARN] Unknown sequencing policy '{name}', using synthetic timestamps")
    return SyntheticTimestampPolicy()
