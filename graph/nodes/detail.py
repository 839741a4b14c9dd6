from graph.state import LookupState
from graph.nodes.clients import pipedrive_client
from loguru import logger

async def fetch_detail(state: LookupState) -> LookupState:
    """Load the full record of the best match, preferring deals over leads."""
    client = pipedrive_client(state)
    deal = state.get("deal_candidate")
    lead = state.get("lead_candidate")

    if deal:
        logger.info(f"Fetching deal detail for {deal.hit.id}")
        state["best_match"] = {"type": "deal", "data": await client.get_deal_info(deal.hit.id)}
    elif lead:
        logger.info(f"Fetching lead detail for {lead.hit.id}")
        state["best_match"] = {"type": "lead", "data": await client.get_lead_info(lead.hit.id)}

    return state

async def fetch_activities(state: LookupState) -> LookupState:
    """Attach the deal's most recent activities before summarizing."""
    data = state["summary_data"]
    data["activities"] = await pipedrive_client(state).get_recent_deal_activities(data["id"])
    logger.info(f"Loaded {len(data['activities'])} recent activities for deal {data['id']}")
    return state
