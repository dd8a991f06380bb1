from enum import Enum


class NavigationState(Enum):
    UNKNOWN = "at_unknown_location"
    LIST_PAGE = "at_list_page"
    PANEL_COLLAPSED = "panel_collapsed"
    PANEL_EXPANDED = "panel_expanded"
    DETAIL_PAGE = "at_detail_page"


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"


class DebugLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def to_logging(cls):
        return {
            cls.INFO: "info",
            cls.SUCCESS: "info",
            cls.WARNING: "warning",
            cls.ERROR: "error",
        }


class CancellationPolicy(str, Enum):
    FREE = "Free Cancellation"
    NON_REFUNDABLE = "Non-Refundable"
    FEE = "Cancellation Fee Applies"
