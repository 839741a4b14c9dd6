from graph.state import LookupState
from tools.matching import find_best_match, find_best_gated_match, pick_summary_target
from loguru import logger

class NoMatchError(LookupError):
    """No lead or deal matched the search term."""

def rank_matches(state: LookupState) -> LookupState:
    """Score every hit of both searches and keep the best of each."""
    term = state["search_term"]

    state["lead_candidate"] = find_best_match(state["lead_results"].items, term)
    state["deal_candidate"] = find_best_match(state["deal_results"].items, term)

    for kind, candidate in (("lead", state["lead_candidate"]), ("deal", state["deal_candidate"])):
        if candidate:
            logger.info(f"Best {kind}: {candidate.hit.id} (score {candidate.score}, remote {candidate.result_score})")
    return state

def select_summary_target(state: LookupState) -> LookupState:
    """Pick the single lead or deal to summarize among hits matching the term."""
    term = state["search_term"]

    best_lead = find_best_gated_match(state["lead_results"].items, term)
    best_deal = find_best_gated_match(state["deal_results"].items, term)
    target = pick_summary_target(best_lead, best_deal)

    if target is None:
        raise NoMatchError("No matching leads or deals found")

    logger.info(f"Summarizing {target.kind} {target.id}")
    state["summary_data"] = target.to_record()
    return state

def detail_or_fallback(state: LookupState) -> str:
    if state.get("deal_candidate") or state.get("lead_candidate"):
        return "fetch_detail"
    logger.info(f"No match for '{state['search_term']}', returning closest matches")
    return "assemble"

def needs_activities(state: LookupState) -> str:
    return "fetch_activities" if state["summary_data"]["type"] == "deal" else "summarize"
