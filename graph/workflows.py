from typing import Optional
from langgraph.graph import StateGraph, START, END
from loguru import logger

from graph.state import LookupState
from graph.nodes.search import search_concurrently, search_in_turn
from graph.nodes.match import rank_matches, select_summary_target, detail_or_fallback, needs_activities
from graph.nodes.detail import fetch_detail, fetch_activities
from graph.nodes.assemble import assemble
from graph.nodes.summarize import summarize


class ActionError(RuntimeError):
    """Single failure reported back to the action caller."""


def build_info_workflow():
    """Search both collections, fetch the best record and render it as JSON text."""
    workflow = StateGraph(LookupState)

    workflow.add_node("search", search_concurrently)
    workflow.add_node("match", rank_matches)
    workflow.add_node("fetch_detail", fetch_detail)
    workflow.add_node("assemble", assemble)

    workflow.add_edge(START, "search")
    workflow.add_edge("search", "match")
    workflow.add_conditional_edges(
        "match",
        detail_or_fallback,
        {
            "fetch_detail": "fetch_detail",
            "assemble": "assemble"
        }
    )
    workflow.add_edge("fetch_detail", "assemble")
    workflow.add_edge("assemble", END)

    return workflow.compile()


def build_summary_workflow():
    """Search both collections, pick a record and have the LLM summarize it."""
    workflow = StateGraph(LookupState)

    workflow.add_node("search", search_in_turn)
    workflow.add_node("select", select_summary_target)
    workflow.add_node("fetch_activities", fetch_activities)
    workflow.add_node("summarize", summarize)

    workflow.add_edge(START, "search")
    workflow.add_edge("search", "select")
    workflow.add_conditional_edges(
        "select",
        needs_activities,
        {
            "fetch_activities": "fetch_activities",
            "summarize": "summarize"
        }
    )
    workflow.add_edge("fetch_activities", "summarize")
    workflow.add_edge("summarize", END)

    return workflow.compile()


info_graph = build_info_workflow()
summary_graph = build_summary_workflow()


async def run_info_action(
    company_domain: str,
    api_key: str,
    search_term: str,
    instructions: Optional[str] = None,
    log=None
) -> str:
    """
    Look up the lead or deal best matching a search term.

    Returns:
        Pruned JSON text, at most 90,000 characters

    Raises:
        ActionError: if the selected record cannot be fetched
    """
    initial_state = {
        "company_domain": company_domain,
        "pipedrive_api_key": api_key,
        "search_term": search_term,
        "instructions": instructions,
        "log": log
    }

    try:
        result = await info_graph.ainvoke(initial_state)
    except Exception as e:
        logger.error(f"Lead/deal lookup failed for '{search_term}': {e}")
        raise ActionError(f"Failed to process request: {e}") from e

    return result["text_response"]


async def run_summary_action(
    company_domain: str,
    api_key: str,
    openai_api_key: str,
    openai_model: str,
    search_term: str,
    log=None
) -> str:
    """
    Summarize the lead or deal best matching a search term.

    Raises:
        ActionError: if nothing matches, or the summary cannot be generated
    """
    initial_state = {
        "company_domain": company_domain,
        "pipedrive_api_key": api_key,
        "openai_api_key": openai_api_key,
        "openai_model": openai_model,
        "search_term": search_term,
        "log": log
    }

    try:
        result = await summary_graph.ainvoke(initial_state)
    except Exception as e:
        logger.error(f"Lead/deal summary failed for '{search_term}': {e}")
        raise ActionError(f"Failed to process request: {e}") from e

    return result["text_response"]
