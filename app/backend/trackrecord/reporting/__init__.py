"""Worked-hours report compilation engine.

Pure, synchronous computation over already-fetched work packets; the only
collaborator it calls is a ``RecordSource``.
"""

from trackrecord.reporting.calculators import (
    HourAccumulator,
    ReportCell,
    ReportColumnTotal,
    ReportRow,
    ReportSection,
    ReportUserColumnTotal,
    ReportUserData,
    ReportUserRowTotal,
)
from trackrecord.reporting.errors import ReportError, ReportInvariantError
from trackrecord.reporting.periods import (
    GRANULARITY_DEFINITIONS,
    DateInterval,
    Granularity,
    GranularityDefinition,
    generate_columns,
    granularity_definition,
    granularity_labels,
)
from trackrecord.reporting.ranges import RangeSelection, dataset_range, resolve_range
from trackrecord.reporting.report import (
    RecordSource,
    Report,
    ReportState,
    SectionPredicate,
    compile_report,
    single_section,
)
from trackrecord.reporting.sweep import PacketCursor, calculate_cell

__all__ = [
    "GRANULARITY_DEFINITIONS",
    "DateInterval",
    "Granularity",
    "GranularityDefinition",
    "HourAccumulator",
    "PacketCursor",
    "RangeSelection",
    "RecordSource",
    "Report",
    "ReportCell",
    "ReportColumnTotal",
    "ReportError",
    "ReportInvariantError",
    "ReportRow",
    "ReportSection",
    "ReportState",
    "ReportUserColumnTotal",
    "ReportUserData",
    "ReportUserRowTotal",
    "SectionPredicate",
    "calculate_cell",
    "compile_report",
    "dataset_range",
    "generate_columns",
    "granularity_definition",
    "granularity_labels",
    "resolve_range",
    "single_section",
]
