from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

RecordKind = Literal["lead", "deal"]


class NamedRef(BaseModel):
    """Nested organization/person reference on a search hit."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[Union[int, str]] = None
    name: Optional[str] = None


class _HitBase(BaseModel):
    # Unknown fields are kept so the whole hit can be handed to the LLM
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Union[int, str]
    title: Optional[str] = None
    organization: Optional[NamedRef] = None
    person: Optional[NamedRef] = None
    result_score: Optional[float] = None

    def organization_name(self) -> Optional[str]:
        return self.organization.name if self.organization else None

    def person_name(self) -> Optional[str]:
        return self.person.name if self.person else None

    def to_record(self) -> Dict[str, Any]:
        """Plain dict of the hit tagged with its record type."""
        fields = self.model_dump(mode="json", exclude={"kind"})
        return {"type": self.kind, **fields}


class LeadHit(_HitBase):
    kind: Literal["lead"] = "lead"


class DealHit(_HitBase):
    kind: Literal["deal"] = "deal"


SearchHit = Annotated[Union[LeadHit, DealHit], Field(discriminator="kind")]

HIT_TYPES = {"lead": LeadHit, "deal": DealHit}


class SearchResult(BaseModel):
    """Validated first page of a Pipedrive item search."""
    kind: RecordKind
    items: List[SearchHit] = Field(default_factory=list)
    found: Optional[int] = None  # raw entries returned, before validation

    def hit_count(self) -> int:
        return self.found if self.found is not None else len(self.items)


@dataclass
class MatchCandidate:
    """Best hit of a result set with the scores used to rank it."""
    hit: Optional[Union[LeadHit, DealHit]]
    score: int
    result_score: Optional[float]


def search_entries(payload: Any) -> List[Any]:
    """Raw entries of a search response body, empty when the shape is unexpected."""
    data = payload.get("data") if isinstance(payload, dict) else None
    entries = data.get("items") if isinstance(data, dict) else None
    return entries if isinstance(entries, list) else []


def parse_search_items(kind: str, payload: Any, log=None) -> List[Union[LeadHit, DealHit]]:
    """
    Turn a raw ``/{kind}s/search`` response body into typed hits.

    Pipedrive wraps every hit as ``{"result_score": n, "item": {...}}``. The
    envelope is unwrapped here and its score copied onto the hit, so callers
    never deal with the two shapes. Entries that cannot be validated are
    dropped.

    Args:
        kind: "lead" or "deal"
        payload: Decoded JSON response
        log: Logger receiving warnings for dropped entries

    Returns:
        List of LeadHit or DealHit
    """
    log = log or logger
    entries = search_entries(payload)

    model = HIT_TYPES[kind]
    hits = []
    for entry in entries:
        item = entry.get("item", entry) if isinstance(entry, dict) else None
        if not isinstance(item, dict):
            log.warning(f"Skipping malformed {kind} search entry: {entry!r}")
            continue

        fields = dict(item)
        if "item" in entry and "result_score" in entry:
            fields["result_score"] = entry["result_score"]
        fields["kind"] = kind

        try:
            hits.append(model.model_validate(fields))
        except ValidationError as e:
            log.warning(f"Skipping invalid {kind} search hit: {e.error_count()} validation errors")

    return hits
