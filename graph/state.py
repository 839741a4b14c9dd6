from typing import TypedDict, Optional, Dict, Any
from tools.models import MatchCandidate, SearchResult

class LookupState(TypedDict, total=False):
    """State shape for the Pipedrive lookup and summary workflows."""
    company_domain: str
    pipedrive_api_key: str
    search_term: str
    instructions: Optional[str]
    openai_api_key: str
    openai_model: str
    lead_results: SearchResult
    deal_results: SearchResult
    lead_candidate: Optional[MatchCandidate]     # ranked match, info flow
    deal_candidate: Optional[MatchCandidate]
    best_match: Optional[Dict[str, Any]]         # {"type": "lead" | "deal", "data": {...}}
    summary_data: Optional[Dict[str, Any]]       # matched hit (+ activities) for the LLM
    text_response: str
    log: Optional[Any]                           # logger for the clients, loguru when unset
