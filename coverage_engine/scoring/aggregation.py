"""
Global Aggregation

Pure functions over per-country result dictionaries (the shape produced by
CountryCoverage.to_dict(), which is also what the score cache stores):

- Global coverage summary: averages, totals, status distribution,
  top and priority countries
- Country list filtering and sorting
- Language statistics
- Global recommendations
- Founder coverage summary, language matrix, generation plan
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .helpers import STATUS_ORDER, average, round_score, safe_percentage

logger = logging.getLogger(__name__)

TOP_COUNTRIES_LIMIT = 10
PRIORITY_COUNTRIES_LIMIT = 20
PRIORITY_OVERALL_THRESHOLD = 60

SORTABLE_FIELDS = (
    "priority_score", "overall_score", "recruitment_score", "awareness_score",
    "founder_score", "name", "code", "region", "total_articles",
    "published_articles", "unpublished_articles", "missing_targets",
)

LIST_FIELDS = (
    "region", "recruitment_score", "awareness_score", "founder_score",
    "overall_score", "status", "priority_score", "total_articles",
    "published_articles", "unpublished_articles", "missing_targets",
)


def to_list_entry(score: Dict[str, Any]) -> Dict[str, Any]:
    """Compact list form of a country result."""
    entry = {
        "id": score["country_id"],
        "name": score["country_name"],
        "code": score["country_code"],
    }
    entry.update({key: score[key] for key in LIST_FIELDS})
    return entry


def _sort_desc(items: Iterable[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    return sorted(items, key=lambda item: item[key], reverse=True)


# ============================================================================
# GLOBAL COVERAGE
# ============================================================================

def summarize_global_coverage(platform_id: int, scores: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate per-country results of one platform.

    Args:
        platform_id: Platform the scores belong to
        scores: Country results, in reference order

    Returns:
        Dictionary with summary, distribution, top_countries and
        priority_countries
    """
    total_countries = len(scores)

    distribution: Dict[str, int] = OrderedDict((status, 0) for status in STATUS_ORDER)
    for score in scores:
        distribution[score["status"]] += 1

    top_countries = [
        to_list_entry(s) for s in _sort_desc(scores, "overall_score")[:TOP_COUNTRIES_LIMIT]
    ]
    priority_countries = [
        to_list_entry(s)
        for s in _sort_desc(scores, "priority_score")
        if s["overall_score"] < PRIORITY_OVERALL_THRESHOLD
    ][:PRIORITY_COUNTRIES_LIMIT]

    return {
        "platform_id": platform_id,
        "total_countries": total_countries,
        "summary": {
            "average_recruitment": round_score(average([s["recruitment_score"] for s in scores])),
            "average_awareness": round_score(average([s["awareness_score"] for s in scores])),
            "average_founder": round_score(average([s["founder_score"] for s in scores])),
            "average_overall": round_score(average([s["overall_score"] for s in scores])),
            "total_published": sum(s["published_articles"] for s in scores),
            "total_unpublished": sum(s["unpublished_articles"] for s in scores),
            "total_countries": total_countries,
        },
        "distribution": dict(distribution),
        "top_countries": top_countries,
        "priority_countries": priority_countries,
    }


# ============================================================================
# COUNTRY LIST
# ============================================================================

def filter_and_sort_countries(
    entries: Sequence[Dict[str, Any]],
    region: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "priority_score",
    sort_order: str = "desc",
) -> List[Dict[str, Any]]:
    """
    Filter and sort country list entries.

    Args:
        entries: List entries ordered by country name
        region: Case-insensitive region equality
        status: Exact status bucket
        search: Case-insensitive substring of name or code
        sort_by: Field to sort on (stable)
        sort_order: "asc" or "desc"

    Raises:
        ValueError: Unknown sort field or order
    """
    if sort_by not in SORTABLE_FIELDS:
        raise ValueError(f"Unsupported sort field: {sort_by}")
    if sort_order not in ("asc", "desc"):
        raise ValueError(f"Unsupported sort order: {sort_order}")

    results = list(entries)

    if region:
        wanted = region.lower()
        results = [e for e in results if (e.get("region") or "").lower() == wanted]

    if status:
        results = [e for e in results if e["status"] == status]

    if search:
        needle = search.lower()
        results = [
            e for e in results
            if needle in (e.get("name") or "").lower() or needle in (e.get("code") or "").lower()
        ]

    def sort_key(entry: Dict[str, Any]):
        value = entry.get(sort_by)
        if isinstance(value, str):
            return value.lower()
        return value if value is not None else 0

    return sorted(results, key=sort_key, reverse=(sort_order == "desc"))


def paginate(items: Sequence[Any], page: int, per_page: int) -> Dict[str, Any]:
    """Slice a list into one page with pagination metadata."""
    page = max(1, page)
    per_page = max(1, per_page)
    offset = (page - 1) * per_page
    total = len(items)
    return {
        "items": list(items[offset:offset + per_page]),
        "meta": {
            "current_page": page,
            "per_page": per_page,
            "total": total,
            "last_page": (total + per_page - 1) // per_page,
        },
    }


# ============================================================================
# LANGUAGES
# ============================================================================

def build_language_stats(
    languages: Sequence[Any],
    totals: Dict[int, Dict[str, int]],
    country_count: int,
) -> Dict[str, Dict[str, Any]]:
    """
    Per-language totals of a platform.

    Args:
        languages: Resolved LanguageRefs, in supported order
        totals: language_id -> {total, published, countries_covered}
        country_count: Number of reference countries
    """
    stats: Dict[str, Dict[str, Any]] = OrderedDict()
    for language in languages:
        row = totals.get(language.id, {})
        total = row.get("total", 0)
        published = row.get("published", 0)
        covered = row.get("countries_covered", 0)
        stats[language.code] = {
            "language_id": language.id,
            "language_code": language.code,
            "language_name": language.name,
            "total_articles": total,
            "published_articles": published,
            "unpublished_articles": total - published,
            "countries_covered": covered,
            "coverage_percent": round_score(safe_percentage(covered, country_count)),
        }
    return stats


# ============================================================================
# RECOMMENDATIONS
# ============================================================================

def collect_global_recommendations(
    scores: Sequence[Dict[str, Any]],
    limit: int,
) -> List[Dict[str, Any]]:
    """
    Merge country recommendations, annotated with the country.

    Args:
        scores: Country results, highest priority first
        limit: Maximum recommendations returned
    """
    merged: List[Dict[str, Any]] = []
    for score in scores:
        for recommendation in score["recommendations"]:
            item = dict(recommendation)
            item["country_id"] = score["country_id"]
            item["country_name"] = score["country_name"]
            item["country_code"] = score["country_code"]
            merged.append(item)

    return _sort_desc(merged, "priority")[:max(0, limit)]


# ============================================================================
# FOUNDER
# ============================================================================

def summarize_founder_coverage(
    rows: Sequence[Dict[str, Any]],
    founder_name: str,
) -> Dict[str, Any]:
    """
    Founder coverage of every country.

    Args:
        rows: One row per country with score, completed_targets,
            total_targets and breakdown
        founder_name: Display name
    """
    countries = _sort_desc(rows, "score")
    return {
        "founder_name": founder_name,
        "total_countries": len(countries),
        "total_targets": sum(row["total_targets"] for row in countries),
        "completed_targets": sum(row["completed_targets"] for row in countries),
        "average_score": round_score(average([row["score"] for row in countries])),
        "countries": countries,
    }


# ============================================================================
# MATRIX
# ============================================================================

def build_matrix_rows(
    scores: Sequence[Dict[str, Any]],
    language_codes: Sequence[str],
) -> List[Dict[str, Any]]:
    """Countries × languages grid of language scores."""
    rows = []
    for score in scores:
        cells = OrderedDict()
        for code in language_codes:
            language_score = score["language_scores"].get(code) or {}
            cells[code] = {
                "score": language_score.get("score", 0),
                "published": language_score.get("published_articles", 0),
                "total": language_score.get("total_articles", 0),
                "status": language_score.get("status", "missing"),
            }
        rows.append({
            "country_id": score["country_id"],
            "country_name": score["country_name"],
            "country_code": score["country_code"],
            "overall_score": score["overall_score"],
            "cells": dict(cells),
        })
    return rows


# ============================================================================
# GENERATION PLAN
# ============================================================================

RECRUITMENT_TASK_COST = 0.15
AWARENESS_TASK_COST = 0.20
FOUNDER_TASK_COST = 0.25
FOUNDER_TASK_PRIORITY = 90
RECRUITMENT_TASK_THRESHOLD = 80
MINUTES_PER_TASK = 2

GENERATION_CONTENT_TYPES = ("recruitment", "awareness", "founder")


def plan_generation_tasks(
    scores: Sequence[Dict[str, Any]],
    languages: Sequence[str],
    content_types: Sequence[str],
    founder_name: str,
) -> Dict[str, Any]:
    """
    Production tasks for the gaps of the given countries.

    - recruitment: when the language score is below 80
    - awareness: always
    - founder: when either founder slot of the language is incomplete

    Returns:
        {"tasks": [...], "summary": {...}}, tasks sorted by priority descending
    """
    tasks: List[Dict[str, Any]] = []

    for score in scores:
        base = {
            "country_id": score["country_id"],
            "country_name": score["country_name"],
            "country_code": score["country_code"],
        }
        for language in languages:
            for content_type in content_types:
                task = None
                if content_type == "recruitment":
                    language_score = score["language_scores"].get(language)
                    if not language_score or language_score["score"] < RECRUITMENT_TASK_THRESHOLD:
                        task = {"priority": score["priority_score"], "estimated_cost": RECRUITMENT_TASK_COST}
                elif content_type == "awareness":
                    task = {"priority": score["priority_score"], "estimated_cost": AWARENESS_TASK_COST}
                elif content_type == "founder":
                    slots = score["founder_breakdown"].get(language)
                    complete = bool(slots) and all(
                        slot["completed"] for key, slot in slots.items() if key != "combined_progress"
                    )
                    if not complete:
                        task = {
                            "target_name": founder_name,
                            "priority": FOUNDER_TASK_PRIORITY,
                            "estimated_cost": FOUNDER_TASK_COST,
                        }

                if task is not None:
                    tasks.append(dict(base, language=language, content_type=content_type, status="pending", **task))

    tasks = _sort_desc(tasks, "priority")
    total_cost = sum(task["estimated_cost"] for task in tasks)

    return {
        "tasks": tasks,
        "summary": {
            "total_tasks": len(tasks),
            "total_countries": len({task["country_id"] for task in tasks}),
            "total_languages": len({task["language"] for task in tasks}),
            "estimated_cost": round_score(total_cost),
            "estimated_duration": f"{len(tasks) * MINUTES_PER_TASK} minutes",
        },
    }
