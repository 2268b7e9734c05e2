"""Form Engine status management module.

Export ExportState/ExportResult/Notification for sharing between the agent and the UI layer."""

from .state import ExportState, ExportResult, Notification

__all__ = ["ExportState", "ExportResult", "Notification"]
