"""Board statistics and rare-color merging."""

from pixel_bead.analyze.stats import ColorStat, GridStats, MergePlan, compute_stats, merge_rare, plan_merge

__all__ = ["ColorStat", "GridStats", "MergePlan", "compute_stats", "merge_rare", "plan_merge"]
