"""Background job modules for RQ workers and schedulers."""

from .analytics import aggregate_analytics_job
from .quota import reset_monthly_quotas_job

__all__ = ["aggregate_analytics_job", "reset_monthly_quotas_job"]
