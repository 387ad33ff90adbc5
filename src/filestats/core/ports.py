"""Port interfaces for report renderers.

The aggregators hand finished summaries to a renderer and never format
output themselves. Renderers implement this protocol.
"""

from typing import Protocol, runtime_checkable

from filestats.core.models import DirectorySummary, LogSummary


@runtime_checkable
class ReportRendererPort(Protocol):
    """Port for turning finished summaries into report documents.

    Examples: TextReportRenderer, JsonReportRenderer.
    """

    def render_directory(self, summary: DirectorySummary) -> str:
        """Render a directory summary."""
        ...

    def render_log(self, summary: LogSummary) -> str:
        """Render a log summary."""
        ...
