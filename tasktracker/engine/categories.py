"""Category aggregation over time logs.

Category keys have the form ``"<listSlug>.<itemSlug>"``. Only the first dot
separates the two parts; the item part may contain further dots. Display
titles come from a ``CategoryDirectory``; this module never reads storage
itself.
"""

import re
from typing import Dict, Iterable, Optional, Protocol, Tuple

from pydantic import BaseModel, Field

from tasktracker.models.time_log import TimeLog
from tasktracker.models.constants import UNCATEGORIZED_KEY


class CategoryDisplayInfo(BaseModel):
    """Resolved titles for a category key."""
    list_title: str = ""
    item_title: str = ""
    full_display: str = "Uncategorized"


class CategoryDirectory(Protocol):
    """Lookup of category titles (implemented by the category list store)."""

    def get_display_info(self, category_key: Optional[str]) -> CategoryDisplayInfo:
        ...

    def get_list_title(self, list_slug: str) -> Optional[str]:
        ...


class CategoryStat(BaseModel):
    """Hours and log count for one category key."""
    key: str
    list_slug: str
    item_slug: str
    list_title: str
    category_title: str
    full_display: str
    hours: float = 0.0
    log_count: int = 0


class CategoryItemStat(BaseModel):
    """Per-category detail nested in a list rollup."""
    slug: str
    title: str
    hours: float = 0.0
    log_count: int = 0


class CategoryListStat(BaseModel):
    """Rollup of all categories in one list."""
    slug: str
    title: str
    hours: float = 0.0
    log_count: int = 0
    categories: Dict[str, CategoryItemStat] = Field(default_factory=dict)


class CategoryAnalysis(BaseModel):
    """Result of analyzing a set of time logs by category."""
    category_stats: Dict[str, CategoryStat] = Field(default_factory=dict)
    category_list_stats: Dict[str, CategoryListStat] = Field(default_factory=dict)
    total_categorized_hours: float = 0.0
    uncategorized_hours: float = 0.0
    total_hours: float = 0.0


def generate_slug(title: str) -> str:
    """Turn a title into a URL-friendly slug ('Deep Work!' -> 'deep-work')."""
    slug = (title or "").lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def generate_category_key(list_slug: str, item_slug: str) -> str:
    """Compose a category key from its parts."""
    return f"{list_slug}.{item_slug}"


def parse_category_key(category_key: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Split a category key on its first dot.

    Returns (None, None) when the key is missing, has no dot, or either part
    is empty.
    """
    if not category_key or "." not in category_key:
        return None, None
    list_slug, item_slug = category_key.split(".", 1)
    if not list_slug or not item_slug:
        return None, None
    return list_slug, item_slug


def analyze_categories_in_time_logs(
    logs: Iterable[TimeLog],
    directory: CategoryDirectory,
) -> CategoryAnalysis:
    """Aggregate hours per category and per category list.

    Logs without a category key, or with one that does not parse, are counted
    as uncategorized.

    Args:
        logs: Time logs to analyze
        directory: Resolves keys and list slugs to display titles

    Returns:
        CategoryAnalysis with per-category stats, per-list rollups and totals
    """
    analysis = CategoryAnalysis()

    for log in logs:
        hours = log.hours or 0
        list_slug, item_slug = parse_category_key(log.category_key)
        if list_slug is None:
            analysis.uncategorized_hours += hours
            continue

        key = log.category_key
        analysis.total_categorized_hours += hours

        stat = analysis.category_stats.get(key)
        if stat is None:
            info = directory.get_display_info(key)
            stat = CategoryStat(
                key=key,
                list_slug=list_slug,
                item_slug=item_slug,
                list_title=info.list_title,
                category_title=info.item_title,
                full_display=info.full_display,
            )
            analysis.category_stats[key] = stat
        stat.hours += hours
        stat.log_count += 1

        list_stat = analysis.category_list_stats.get(list_slug)
        if list_stat is None:
            list_stat = CategoryListStat(
                slug=list_slug,
                title=directory.get_list_title(list_slug) or list_slug,
            )
            analysis.category_list_stats[list_slug] = list_stat
        list_stat.hours += hours
        list_stat.log_count += 1

        item_stat = list_stat.categories.get(item_slug)
        if item_stat is None:
            item_stat = CategoryItemStat(slug=item_slug, title=stat.category_title)
            list_stat.categories[item_slug] = item_stat
        item_stat.hours += hours
        item_stat.log_count += 1

    analysis.total_hours = analysis.total_categorized_hours + analysis.uncategorized_hours
    return analysis


def category_time_summaries(logs: Iterable[TimeLog]) -> Dict[str, float]:
    """Total hours per raw category key ('uncategorized' when missing)."""
    summaries: Dict[str, float] = {}
    for log in logs:
        key = log.category_key or UNCATEGORIZED_KEY
        summaries[key] = summaries.get(key, 0) + (log.hours or 0)
    return summaries
