import asyncio
from graph.state import LookupState
from graph.nodes.clients import pipedrive_client
from loguru import logger

async def search_concurrently(state: LookupState) -> LookupState:
    """Run the lead and deal searches side by side and wait for both."""
    term = state["search_term"]
    logger.info(f"Searching Pipedrive leads and deals for: {term}")

    client = pipedrive_client(state)
    lead_results, deal_results = await asyncio.gather(
        client.search("lead", term),
        client.search("deal", term)
    )

    state["lead_results"] = lead_results
    state["deal_results"] = deal_results

    logger.info(f"Found {len(lead_results.items)} leads and {len(deal_results.items)} deals")
    return state

async def search_in_turn(state: LookupState) -> LookupState:
    """Search leads, then deals."""
    term = state["search_term"]
    logger.info(f"Searching Pipedrive leads then deals for: {term}")

    client = pipedrive_client(state)
    state["lead_results"] = await client.search("lead", term)
    state["deal_results"] = await client.search("deal", term)

    logger.info(f"Found {len(state['lead_results'].items)} leads and {len(state['deal_results'].items)} deals")
    return state
