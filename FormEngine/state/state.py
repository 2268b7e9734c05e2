"""Form Engine status management
Define the export status, result and notification data structures shared with the UI layer"""

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Any, List, Optional
from datetime import datetime


@dataclass
class Notification:
    """A user-visible message: success, error, warning or info."""
    level: str
    message: str
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {"level": self.level, "message": self.message, "timestamp": self.timestamp}


@dataclass
class ExportResult:
    """Output of one successful export run."""
    literal_xml: str = ""                # populated document for direct use/download
    template_xml: str = ""               # same structure with placeholder leaves
    document: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format, XML bodies summarized by length."""
        return {
            "document_id": self.document.get("documentId"),
            "literal_xml_length": len(self.literal_xml),
            "template_xml_length": len(self.template_xml),
            "warnings": list(self.warnings),
            "generated_at": self.generated_at,
        }


@dataclass
class ExportState:
    """Export status management.

    Tracks the last export attempt; a failed attempt never clears the previous result."""
    status: str = "pending"              # Status: pending, processing, completed, failed
    export_count: int = 0
    error_message: str = ""
    last_result: Optional[ExportResult] = None
    # Most recent notifications only; the agent sizes this from MAX_NOTIFICATIONS
    notifications: Deque[Notification] = field(default_factory=lambda: deque(maxlen=100))

    def mark_processing(self):
        self.status = "processing"
        self.error_message = ""

    def mark_completed(self, result: ExportResult):
        """Marked as complete and store the new result."""
        self.status = "completed"
        self.export_count += 1
        self.last_result = result

    def mark_failed(self, error_message: str = ""):
        """Mark as failed and log the last error message."""
        self.status = "failed"
        self.error_message = error_message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format to facilitate serialization to the front end."""
        return {
            "status": self.status,
            "export_count": self.export_count,
            "error_message": self.error_message,
            "has_result": self.last_result is not None,
            "last_result": self.last_result.to_dict() if self.last_result else None,
            "notifications": [n.to_dict() for n in self.notifications],
        }
