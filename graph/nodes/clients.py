from graph.state import LookupState
from tools.llm import LLMClient
from tools.pipedrive import PipedriveClient

def pipedrive_client(state: LookupState) -> PipedriveClient:
    """Client bound to the credentials and logger of the current request."""
    return PipedriveClient(state["pipedrive_api_key"], state["company_domain"], log=state.get("log"))

def llm_client(state: LookupState) -> LLMClient:
    return LLMClient(state["openai_api_key"], state["openai_model"], log=state.get("log"))
