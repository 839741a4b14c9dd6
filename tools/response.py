import json
from typing import Any, Dict, List, Optional

from tools.models import SearchResult

MAX_RESPONSE_CHARS = 90000
CLOSEST_MATCH_LIMIT = 3
NO_MATCH_MESSAGE = "No exact matches found."
INSTRUCTIONS_PREFIX = "Instructions for the following content: "


def remove_nulls(value: Any) -> Any:
    """Recursively drop None values from dicts and lists, keeping lists as lists."""
    if isinstance(value, dict):
        return {key: remove_nulls(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [remove_nulls(item) for item in value if item is not None]
    return value


def _closest(result: SearchResult) -> List[Dict[str, Any]]:
    return [{"id": hit.id, "title": hit.title} for hit in result.items[:CLOSEST_MATCH_LIMIT]]


def build_info_payload(
    search_term: str,
    leads: SearchResult,
    deals: SearchResult,
    best_match: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """
    Build the lookup payload.

    Args:
        search_term: Term the caller searched for
        leads: Lead search result
        deals: Deal search result
        best_match: ``{"type": ..., "data": ...}`` of the selected record, if any

    Returns:
        Payload dict, not yet pruned
    """
    payload = {
        "searchTerm": search_term,
        "leadsFound": leads.hit_count(),
        "dealsFound": deals.hit_count(),
    }

    if best_match:
        payload["bestMatch"] = best_match
    else:
        payload["message"] = NO_MATCH_MESSAGE
        payload["closestMatches"] = {
            "deals": _closest(deals),
            "leads": _closest(leads),
        }

    return payload


def render_response(payload: Dict[str, Any], instructions: Optional[str] = None) -> str:
    """Prune, serialize and bound the payload text."""
    text = json.dumps(remove_nulls(payload), indent=2, ensure_ascii=False)

    if instructions:
        text = f"{INSTRUCTIONS_PREFIX}{instructions}\n\n{text}"

    # Plain character cut; the tail may no longer be valid JSON
    return text[:MAX_RESPONSE_CHARS]


def assemble_response(
    search_term: str,
    leads: SearchResult,
    deals: SearchResult,
    best_match: Optional[Dict[str, Any]] = None,
    instructions: Optional[str] = None
) -> str:
    return render_response(build_info_payload(search_term, leads, deals, best_match), instructions)
