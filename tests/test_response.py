import json

from tools.models import DealHit, LeadHit, SearchResult
from tools.response import (
    MAX_RESPONSE_CHARS,
    assemble_response,
    build_info_payload,
    remove_nulls,
    render_response,
)


class TestRemoveNulls:
    """Test recursive null pruning."""

    def test_nested_nulls_are_removed(self):
        value = {"a": None, "b": {"c": None, "d": 1}, "e": [{"f": None, "g": 2}, None, 3]}

        assert remove_nulls(value) == {"b": {"d": 1}, "e": [{"g": 2}, 3]}

    def test_lists_stay_lists(self):
        assert remove_nulls({"items": []}) == {"items": []}
        assert isinstance(remove_nulls({"items": [1, 2]})["items"], list)

    def test_falsy_values_are_kept(self):
        assert remove_nulls({"a": 0, "b": "", "c": False}) == {"a": 0, "b": "", "c": False}

    def test_idempotent(self):
        value = {"a": None, "b": [{"c": None, "d": {"e": None}}], "f": {"g": [None]}}

        once = remove_nulls(value)

        assert remove_nulls(once) == once


class TestPayload:
    """Test the lookup payload shapes."""

    def setup_method(self):
        self.leads = SearchResult(kind="lead", items=[LeadHit(id=f"l{i}", title=f"Lead {i}") for i in range(5)])
        self.deals = SearchResult(kind="deal", items=[DealHit(id=i, title=None) for i in range(2)])

    def test_best_match_payload(self):
        best = {"type": "deal", "data": {"deal": {"id": 1}, "activities": [], "notes": []}}

        payload = build_info_payload("Acme", self.leads, self.deals, best)

        assert payload == {"searchTerm": "Acme", "leadsFound": 5, "dealsFound": 2, "bestMatch": best}

    def test_fallback_lists_closest_matches(self):
        payload = build_info_payload("Acme", self.leads, self.deals)

        assert payload["message"] == "No exact matches found."
        assert payload["closestMatches"]["leads"] == [
            {"id": "l0", "title": "Lead 0"},
            {"id": "l1", "title": "Lead 1"},
            {"id": "l2", "title": "Lead 2"},
        ]
        assert [m["id"] for m in payload["closestMatches"]["deals"]] == [0, 1]

    def test_fallback_with_no_hits(self):
        text = assemble_response("Nothing", SearchResult(kind="lead"), SearchResult(kind="deal"))

        assert json.loads(text) == {
            "searchTerm": "Nothing",
            "leadsFound": 0,
            "dealsFound": 0,
            "message": "No exact matches found.",
            "closestMatches": {"deals": [], "leads": []},
        }

    def test_rendered_payload_has_no_nulls(self):
        text = assemble_response("Acme", self.leads, self.deals)

        assert "null" not in text
        assert json.loads(text)["closestMatches"]["deals"] == [{"id": 0}, {"id": 1}]


class TestRender:
    """Test serialization, instructions and truncation."""

    def test_indented_json(self):
        assert render_response({"a": 1}) == '{\n  "a": 1\n}'

    def test_instructions_prefix(self):
        text = render_response({"a": 1}, instructions="Only list contacts")

        assert text == 'Instructions for the following content: Only list contacts\n\n{\n  "a": 1\n}'

    def test_empty_instructions_are_ignored(self):
        assert render_response({"a": 1}, instructions="") == '{\n  "a": 1\n}'

    def test_long_output_is_truncated(self):
        text = render_response({"notes": "x" * (MAX_RESPONSE_CHARS * 2)})

        assert len(text) == MAX_RESPONSE_CHARS
        assert text.startswith('{\n  "notes": "xxx')

    def test_output_at_limit_is_untouched(self):
        padding = len(render_response({"n": ""}))
        text = render_response({"n": "y" * (MAX_RESPONSE_CHARS - padding)})

        assert len(text) == MAX_RESPONSE_CHARS
        assert text.endswith('"\n}')

    def test_truncation_includes_instructions(self):
        text = render_response({"notes": "x" * MAX_RESPONSE_CHARS}, instructions="Summarize")

        assert len(text) == MAX_RESPONSE_CHARS
        assert text.startswith("Instructions for the following content: Summarize\n\n")
