"""
Sync Run Models

Data structures describing a synchronization run: the state machine states,
the progress reports handed to the observer and the final report.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


class SyncState(str, Enum):
    """States of a synchronization run, in the order they are visited."""
    IDLE = "idle"
    FETCHING_INDEX = "fetching_index"
    FIRST_RUN_EXIT = "first_run_exit"
    CONFIRM_PROMPT = "confirm_prompt"
    REFRESHING_INDEX = "refreshing_index"
    INVALIDATION_CHECK = "invalidation_check"
    FETCHING_ARTICLES = "fetching_articles"
    DOWNLOADING_IMAGES = "downloading_images"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SyncOutcome(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FIRST_RUN = "first_run"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass
class SyncProgress:
    """
    Progress report emitted at every decision point of a run.

    The observer receiving it answers with a continue/cancel decision.
    """
    state: SyncState
    category_file: str
    category_name: str
    position: int
    total: int
    succeeded: int = 0
    images_downloaded: int = 0
    cluster_position: Optional[int] = None
    image_label: Optional[str] = None

    @property
    def message(self) -> str:
        if self.state == SyncState.DOWNLOADING_IMAGES:
            return (f"Downloading {self.category_name} - Article {self.cluster_position} "
                    f"{self.image_label} image...")
        return f"Downloading category: {self.category_name} ({self.position}/{self.total})..."


@dataclass
class SyncReport:
    """Final report of a synchronization run."""
    outcome: SyncOutcome
    attempted: int = 0
    succeeded: int = 0
    total: int = 0
    images_downloaded: int = 0
    images_reused: int = 0
    images_failed: int = 0
    failed_categories: List[str] = field(default_factory=list)
    cache_invalidated: bool = False
    index_timestamp: Optional[int] = None
    error: Optional[str] = None
    elapsed_seconds: float = 0.0

    @property
    def cancelled(self) -> bool:
        return self.outcome in (SyncOutcome.CANCELLED, SyncOutcome.DECLINED)

    @property
    def success(self) -> bool:
        return self.outcome != SyncOutcome.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert the report to a dictionary, including the derived flags."""
        data = asdict(self)
        data["outcome"] = self.outcome.value
        data["cancelled"] = self.cancelled
        data["success"] = self.success
        return data
