"""Issue Series.

Creates the next issue of a recurring GitHub issue series on each run:
- configuration loaded from the environment / `.env`
- structured logging
- previous-issue lookup by label, assignee rotation, linking, closing and pinning
"""

__version__ = "0.1.0"

from issue_series.orchestrator.config import SeriesSettings
from issue_series.orchestrator.inputs import SeriesInputs

__all__ = ["__version__", "SeriesInputs", "SeriesSettings"]
