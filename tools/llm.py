import os
import json
from typing import Dict, Any, Optional
from loguru import logger
from openai import AsyncOpenAI


class SummaryError(RuntimeError):
    """Raised when the completion call fails or returns no text."""


class LLMClient:
    """LLM client for summarizing Pipedrive leads and deals."""

    def __init__(self, api_key: str, model: str, client: Optional[AsyncOpenAI] = None, log=None):
        self.model = model
        self.timeout = float(os.getenv("OPENAI_TIMEOUT", "60"))
        # Single attempt per request
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=self.timeout, max_retries=0)
        self.log = log or logger

    async def summarize(self, data: Dict[str, Any]) -> str:
        """
        Generate a one-screen summary of a lead or deal.

        Args:
            data: Matched record tagged with ``type``; deals also carry ``activities``

        Returns:
            Trimmed summary text

        Raises:
            SummaryError: if the request fails or produces no content
        """
        prompt = self._build_summary_prompt(data)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": self._get_summary_rubric()},
                    {"role": "user", "content": prompt}
                ]
            )
        except Exception as e:
            self.log.error(f"LLM summarization failed: {e}")
            raise SummaryError(f"Failed to generate summary: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            self.log.error("LLM returned an empty summary")
            raise SummaryError("Failed to generate summary: No summary generated")

        self.log.info(f"LLM summary generated for {data.get('type')}")
        return content.strip()

    def _get_summary_rubric(self) -> str:
        """Get the system prompt for summaries."""
        return "You are a helpful assistant that summarizes Pipedrive lead and deal information."

    def _build_summary_prompt(self, data: Dict[str, Any]) -> str:
        """Build the summary prompt for LLM."""
        record_type = data.get("type", "lead")
        label = record_type.capitalize()

        guidelines = [
            f"- {label} Overview: Summarize in two lines, including status and source if available. "
            "Always add lead/deal source if given, and omit any cryptic IDs.",
            "- Company Information: Present all available company details in one line, emphasizing any size information.",
            "- Contact Details: Provide one line per contact, always including phone and email if available.",
            "- Notes and Activities: Avoid duplicating content. If there's overlap between notes and activities, "
            "combine them. Include duration if given. Provide one line per activity.",
        ]
        if record_type == "deal":
            guidelines.append("- Activities: List the most recent activities or next steps, one line per activity.")
        if record_type == "lead":
            guidelines.append(
                '- Deals Information: State "No deals are currently associated with this lead '
                'as it has not been converted to a deal yet."'
            )
        guidelines.append(
            "- Overall Next Steps: Include only if explicitly stated in the input; do not make up any information."
        )
        guideline_text = "\n".join(guidelines)

        prompt = f"""Summarize the following Pipedrive {record_type} information in a concise and well-readable format that fits on one screen:

{label}: {json.dumps(data, ensure_ascii=False, default=str)}

Please adhere to the following guidelines:

{guideline_text}

Output should be in plain text without any special formatting.

Use only the information provided above. Do not add any information that is not present in the given data."""

        return prompt
