"""
Round-robin assignment feature package.

Ranks the hosts of a round-robin event type by fairness and drops the
ones whose booking lead exceeds the configured threshold.
"""

from .domain import Host, HostUser, PerUserData, RoundRobinEventType  # noqa: F401
from .services import LeadThresholdError, filter_hosts_by_lead_threshold  # noqa: F401
