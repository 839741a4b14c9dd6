from graph.state import LookupState
from graph.nodes.clients import llm_client
from loguru import logger

async def summarize(state: LookupState) -> LookupState:
    """Generate the LLM summary of the selected lead or deal."""
    data = state["summary_data"]
    logger.info(f"Starting summarization for {data['type']} {data.get('id')}")

    state["text_response"] = await llm_client(state).summarize(data)
    return state
