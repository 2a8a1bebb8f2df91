# eximchat/utils/pagination.py

from pymongo import ASCENDING, DESCENDING

def build_sort(sort_by: str, sort_order: str = "desc"):
    """Mongo sort on `sort_by`, with `_id` as the tie-breaker in the same direction."""
    direction = DESCENDING if sort_order == "desc" else ASCENDING
    return [(sort_by, direction), ("_id", direction)]
