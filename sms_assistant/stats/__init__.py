from sms_assistant.stats.quota import DailyQuota
from sms_assistant.stats.tracker import StatsTracker

__all__ = ["DailyQuota", "StatsTracker"]
