import os
import time
from typing import Any, Dict, List, Optional, Type
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from graph.workflows import ActionError, run_info_action, run_summary_action

# Load environment variables
load_dotenv()

# Configure logging
logger.add(
    os.getenv("LOG_FILE", "logs/app.log"),
    rotation="1 day",
    retention="7 days",
    level=os.getenv("LOG_LEVEL", "INFO")
)

VERSION = "1.0.0"

app = FastAPI(
    title="Pipedrive Lead & Deal Lookup",
    description="Read lead and deal information from your Pipedrive CRM",
    version=VERSION
)


class PipedriveInput(BaseModel):
    pipedriveCompanyDomain: str = Field(
        ..., min_length=1, title="Pipedrive Company Domain",
        description="Your Pipedrive company domain (e.g. yourcompany.pipedrive.com)"
    )
    pipedriveApiKey: str = Field(
        ..., min_length=1, title="Pipedrive API Key",
        description="Your Pipedrive API key"
    )
    searchTerm: str = Field(
        ..., min_length=1, title="Search Term",
        description="Company name, contact name, or deal name to search for"
    )


class InfoInput(PipedriveInput):
    instructions: Optional[str] = Field(
        None, title="Instructions",
        description="Optional instructions for processing the lead or deal information"
    )


class SummaryInput(PipedriveInput):
    openaiApiKey: str = Field(
        ..., min_length=1, title="OpenAI API Key",
        description="Your OpenAI API key"
    )
    openaiModel: str = Field(
        ..., min_length=1, title="OpenAI Model",
        description="The OpenAI model to use (e.g., gpt-4o)"
    )


class TextOutput(BaseModel):
    textResponse: str


def _parameters(model: Type[BaseModel]) -> List[Dict[str, Any]]:
    """Describe a model's fields as plugin action parameters."""
    return [
        {
            "key": key,
            "name": field.title or key,
            "description": field.description or "",
            "type": "string",
            "validation": {"required": field.is_required()}
        }
        for key, field in model.model_fields.items()
    ]


ACTIONS = [
    {
        "key": "getPipedriveLeadOrDealInfo",
        "name": "Get Pipedrive Lead or Deal Information",
        "description": "Retrieve comprehensive information about a Pipedrive lead or deal",
        "type": "read",
        "inputParameters": _parameters(InfoInput),
        "outputParameters": [{
            "key": "textResponse",
            "name": "Text Response",
            "description": "The comprehensive lead or deal information",
            "type": "string",
            "validation": {"required": True}
        }]
    },
    {
        "key": "getPipedriveLeadOrDealSummary",
        "name": "Get Pipedrive Lead or Deal Status or Summary",
        "description": "Receive a status or summary from a Pipedrive lead or deal using OpenAI",
        "type": "read",
        "inputParameters": _parameters(SummaryInput),
        "outputParameters": [{
            "key": "textResponse",
            "name": "Text Response",
            "description": "The summarized lead or deal information",
            "type": "string",
            "validation": {"required": True}
        }]
    }
]


@app.get("/")
def plugin_definition():
    """Plugin manifest listing the available actions."""
    return {
        "name": "Pipedrive",
        "description": "Read lead and deal information from your Pipedrive CRM",
        "version": VERSION,
        "actions": ACTIONS
    }


@app.post("/actions/getPipedriveLeadOrDealInfo", response_model=TextOutput)
async def get_lead_or_deal_info(body: InfoInput):
    """Return the best-matching lead or deal with its activities and notes as JSON text."""
    start_time = time.time()
    logger.info(f"Lead/deal info requested for: {body.searchTerm}")

    try:
        text = await run_info_action(
            body.pipedriveCompanyDomain,
            body.pipedriveApiKey,
            body.searchTerm,
            instructions=body.instructions
        )
    except ActionError as e:
        return JSONResponse(status_code=500, content={"status": "error", "message": str(e)})

    logger.info(f"Lead/deal info completed in {time.time() - start_time:.2f}s")
    return {"textResponse": text}


@app.post("/actions/getPipedriveLeadOrDealSummary", response_model=TextOutput)
async def get_lead_or_deal_summary(body: SummaryInput):
    """Return an LLM-written summary of the best-matching lead or deal."""
    start_time = time.time()
    logger.info(f"Lead/deal summary requested for: {body.searchTerm}")

    try:
        text = await run_summary_action(
            body.pipedriveCompanyDomain,
            body.pipedriveApiKey,
            body.openaiApiKey,
            body.openaiModel,
            body.searchTerm
        )
    except ActionError as e:
        return JSONResponse(status_code=500, content={"status": "error", "message": str(e)})

    logger.info(f"Lead/deal summary completed in {time.time() - start_time:.2f}s")
    return {"textResponse": text}


@app.get("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": VERSION
    }


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Pipedrive Lead & Deal Lookup")

    uvicorn.run(
        "app:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level="info"
    )
