import httpx
import os
from typing import Dict, Any, List, Optional, Union
from loguru import logger

from tools.models import SearchResult, parse_search_items, search_entries

SEARCH_FIELDS = "title,custom_fields,notes"
SEARCH_LIMIT = 10
RECENT_ACTIVITY_LIMIT = 5


class PipedriveError(RuntimeError):
    """Raised when a required Pipedrive record cannot be fetched."""


def normalize_domain(company_domain: str) -> str:
    """Accept both ``acme`` and ``acme.pipedrive.com`` style company domains."""
    domain = company_domain.strip().replace("https://", "").replace("http://", "").rstrip("/")
    if ".pipedrive.com" in domain:
        return domain
    return f"{domain}.pipedrive.com"


def _data(payload: Any) -> Any:
    return payload.get("data") if isinstance(payload, dict) else None


class PipedriveClient:
    """Read-only Pipedrive CRM client for lead/deal search and detail lookups."""

    def __init__(self, api_key: str, company_domain: str, transport: Optional[httpx.AsyncBaseTransport] = None, log=None):
        self.api_key = api_key
        self.base_url = f"https://{normalize_domain(company_domain)}/api/v1"
        self.timeout = float(os.getenv("PIPEDRIVE_TIMEOUT", "20"))
        self.transport = transport
        self.log = log or logger

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for Pipedrive API requests."""
        return {
            "x-api-token": self.api_key,
            "Accept": "application/json"
        }

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.get(
                f"{self.base_url}/{path}",
                headers=self._get_headers(),
                params=params
            )
            response.raise_for_status()
            return response.json()

    def _log_failure(self, message: str, error: Exception, level: str = "error") -> None:
        emit = getattr(self.log, level)
        if isinstance(error, httpx.HTTPStatusError):
            emit(f"{message}: status={error.response.status_code} body={error.response.text[:500]}")
        else:
            emit(f"{message}: {error}")

    async def search(self, kind: str, term: str) -> SearchResult:
        """
        Search one Pipedrive collection for a free-text term.

        Args:
            kind: "lead" or "deal"
            term: Company, contact or deal name

        Returns:
            First page of hits, or an empty result if the call failed
        """
        try:
            payload = await self._get(
                f"{kind}s/search",
                params={
                    "term": term,
                    "fields": SEARCH_FIELDS,
                    "exact_match": False,
                    "limit": SEARCH_LIMIT
                }
            )
        except Exception as e:
            self._log_failure(f"Error searching for {kind}", e)
            return SearchResult(kind=kind)

        return SearchResult(
            kind=kind,
            items=parse_search_items(kind, payload, log=self.log),
            found=len(search_entries(payload))
        )

    async def get_lead_info(self, lead_id: Union[int, str]) -> Dict[str, Any]:
        """
        Fetch a lead with its activities and notes.

        The lead itself is required; activities and notes fall back to empty
        lists when they cannot be loaded.

        Raises:
            PipedriveError: if the lead record cannot be fetched
        """
        try:
            lead = await self._get(f"leads/{lead_id}")
        except Exception as e:
            self._log_failure(f"Error fetching lead info for {lead_id}", e)
            raise PipedriveError(f"Failed to fetch lead info for {lead_id}: {e}") from e

        activities = await self._get_lead_attachment(lead_id, "activities")
        notes = await self._get_lead_attachment(lead_id, "notes")

        return {
            "lead": _data(lead),
            "activities": activities,
            "notes": notes
        }

    async def _get_lead_attachment(self, lead_id: Union[int, str], name: str) -> List[Dict[str, Any]]:
        try:
            payload = await self._get(f"leads/{lead_id}/{name}")
        except Exception as e:
            self._log_failure(f"Failed to fetch lead {name}", e, level="warning")
            return []
        return _data(payload) or []

    async def get_deal_info(self, deal_id: Union[int, str]) -> Dict[str, Any]:
        """
        Fetch a deal (all custom fields expanded) with its activities and notes.

        Unlike leads, every one of the three calls is required.

        Raises:
            PipedriveError: if any of the calls fails
        """
        try:
            deal = await self._get(f"deals/{deal_id}", params={"get_all_custom_fields": True})
            activities = await self._get(f"deals/{deal_id}/activities")
            notes = await self._get(f"deals/{deal_id}/notes")
        except Exception as e:
            self._log_failure(f"Error fetching deal info for {deal_id}", e)
            raise PipedriveError(f"Failed to fetch deal info for {deal_id}: {e}") from e

        return {
            "deal": _data(deal),
            "activities": _data(activities),
            "notes": _data(notes)
        }

    async def get_recent_deal_activities(self, deal_id: Union[int, str]) -> List[Dict[str, Any]]:
        """Latest activities of a deal, newest due date first. Empty on failure."""
        try:
            payload = await self._get(
                f"deals/{deal_id}/activities",
                params={"limit": RECENT_ACTIVITY_LIMIT, "sort": "due_date DESC"}
            )
        except Exception as e:
            self._log_failure(f"Error fetching activities for deal {deal_id}", e)
            return []
        return _data(payload) or []
