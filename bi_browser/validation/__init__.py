from .errors import ValidationIssue, ValidationError
from .dashboard_validation import validate_dashboard_dict
from .selection_validation import sanitise_snapshot

__all__ = ["ValidationIssue", "ValidationError", "validate_dashboard_dict", "sanitise_snapshot"]
