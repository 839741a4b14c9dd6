from graph.state import LookupState
from tools.response import assemble_response
from loguru import logger

def assemble(state: LookupState) -> LookupState:
    """Render the lookup result as bounded JSON text."""
    state["text_response"] = assemble_response(
        state["search_term"],
        state["lead_results"],
        state["deal_results"],
        best_match=state.get("best_match"),
        instructions=state.get("instructions")
    )
    logger.info(f"Assembled response of {len(state['text_response'])} characters")
    return state
