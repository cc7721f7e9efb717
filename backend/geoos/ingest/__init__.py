"""
Ingest Module

Probe parsing, validation, sequencing and trajectory reconstruction.

Usage:
    from geoos.ingest import TrajectoryIngestor, ProbeCSVReader

    probes = ProbeCSVReader().read_file('data/astana_sample_small.csv')
    result = TrajectoryIngestor(store).ingest(probes)
"""

from geoos.ingest.probe import RawProbe, DEFAULT_COLUMNS
from geoos.ingest.validation import (
    ProbeValidator,
    GlobalBoundsValidator,
    BoundingBoxValidator,
    create_validator
)
from geoos.ingest.sequencing import (
    SequencingPolicy,
    SyntheticTimestampPolicy,
    RecordedTimestampPolicy,
    create_sequencing_policy
)
from geoos.ingest.csv_reader import ProbeCSVReader
from geoos.ingest.ingestor import IngestResult, TrajectoryIngestor


__all__ = [
    'RawProbe',
    'DEFAULT_COLUMNS',
    'ProbeValidator',
    'GlobalBoundsValidator',
    'BoundingBoxValidator',
    'create_validator',
    'SequencingPolicy',
    'SyntheticTimestampPolicy',
    'RecordedTimestampPolicy',
    'create_sequencing_policy',
    'ProbeCSVReader',
    'IngestResult',
    'TrajectoryIngestor'
]
