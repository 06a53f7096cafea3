"""
Analytics: aggregation of detection lists for display.
"""

from .stats import aggregate, format_class_name, sorted_class_stats

__all__ = ["aggregate", "format_class_name", "sorted_class_stats"]
