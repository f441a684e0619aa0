"""
Service layer for round-robin host assignment.
"""

from .lead_threshold import ERROR_CODES, LeadThresholdError, filter_hosts_by_lead_threshold
from .lucky_user import get_ordered_list_of_lucky_users

__all__ = [
    "ERROR_CODES",
    "LeadThresholdError",
    "filter_hosts_by_lead_threshold",
    "get_ordered_list_of_lucky_users",
]
