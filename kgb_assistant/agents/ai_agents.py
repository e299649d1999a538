"""
AI Agents for KGB Assistant

CRITICAL BOUNDARIES:

PROMOTION AGENT:
   - CAN: Rank the employees it is given and explain each pick
   - CANNOT: Suggest anyone who is not in the candidate list
   - CANNOT: Change any employee record

The LLM is an ADVISOR, not a DECISION MAKER.
Its output is a suggestion list shown to a human; nothing is persisted.

Failures never raise out of the agent. They come back as an unsuccessful
result whose error reads "AI analysis failed: <message>".
"""

import json
from datetime import date
from typing import Any, Optional

import google.generativeai as genai
import structlog
from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, ValidationError

from kgb_assistant.config import get_settings
from kgb_assistant.cycle import count_reviews_since
from kgb_assistant.models.employee import EmployeeRecord


logger = structlog.get_logger(__name__)

DEFAULT_SUGGESTIONS = 3
FREQUENCY_WINDOW_YEARS = 3
UNKNOWN_ERROR = "An unknown error occurred during AI analysis."

SAFETY_SETTINGS = {
    "HARM_CATEGORY_HATE_SPEECH": "BLOCK_ONLY_HIGH",
    "HARM_CATEGORY_DANGEROUS_CONTENT": "BLOCK_NONE",
    "HARM_CATEGORY_HARASSMENT": "BLOCK_MEDIUM_AND_ABOVE",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT": "BLOCK_LOW_AND_ABOVE",
}


class PromotionAgentError(Exception):
    """The model returned no usable suggestion list."""
    pass


# =============================================================================
# Models
# =============================================================================

class PromotionCandidate(BaseModel):
    """One employee as presented to the model."""

    name: str = Field(min_length=1)
    years_of_service: float = Field(
        ge=0,
        description="Years of service at the organisation"
    )
    salary_increase_frequency: int = Field(
        ge=0,
        description="Number of salary increases in the last 3 years (higher is better)"
    )
    other_criteria: Optional[str] = Field(
        default=None,
        description="Any other relevant information or qualifications"
    )


class PromotionSuggestion(BaseModel):
    """A suggested candidate and the model's reason."""

    name: str = Field(min_length=1)
    reason: str = Field(min_length=1)


class _SuggestionPayload(BaseModel):
    candidates: list[PromotionSuggestion]


class PromotionSuggestionResult(BaseModel):
    """Outcome of a suggestion request."""

    success: bool
    suggestions: list[PromotionSuggestion] = Field(default_factory=list)
    error: Optional[str] = None


def candidate_from_record(
    record: EmployeeRecord,
    years_of_service: float,
    cycle_length_years: int,
    other_criteria: Optional[str] = None,
    today: Optional[date] = None,
) -> PromotionCandidate:
    """
    Build a candidate from a stored employee.

    The salary increase frequency is the number of KGB review dates of the
    employee's cycle that fall within the last three years.
    """
    today = today or date.today()
    since = today - relativedelta(years=FREQUENCY_WINDOW_YEARS)
    frequency = count_reviews_since(
        record.last_review_date, cycle_length_years, since, until=today
    )

    return PromotionCandidate(
        name=record.name,
        years_of_service=years_of_service,
        salary_increase_frequency=frequency,
        other_criteria=other_criteria,
    )


class PromotionAgent:
    """
    AI agent for the promotion analysis page.

    RESPONSIBILITIES:
    - Build the HR-expert prompt from the candidate list
    - Parse the model's JSON answer into suggestions

    BOUNDARIES:
    - NEVER persists data
    - Suggestions naming people outside the candidate list are dropped
    """

    def __init__(self, model: Any = None):
        """
        Args:
            model: Object with an async generate_content_async(prompt).
                   Defaults to a Gemini model configured from settings.
        """
        self._model = model
        if self._model is None:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        settings = get_settings().gemini
        genai.configure(api_key=settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=settings.model_name,
            generation_config={
                "temperature": settings.temperature,
                "max_output_tokens": settings.max_tokens,
            },
            safety_settings=SAFETY_SETTINGS,
        )

    def build_prompt(
        self,
        candidates: list[PromotionCandidate],
        number_of_suggestions: int,
    ) -> str:
        lines = []
        for candidate in candidates:
            lines.append(f"- Name: {candidate.name}")
            lines.append(f"  - Years of Service: {candidate.years_of_service:g}")
            lines.append(
                f"  - Salary Increase Frequency: {candidate.salary_increase_frequency}"
            )
            lines.append(f"  - Other Relevant Criteria: {candidate.other_criteria or '-'}")
        employee_data = "\n".join(lines)

        return f"""You are an HR expert tasked with identifying potential promotion candidates.

Given the following employee data, suggest the top {number_of_suggestions} candidates for promotion, along with a brief reason for each suggestion.

Employee Data:
{employee_data}

Only suggest people from the list above.

Respond with ONLY a JSON object in this exact format:
{{"candidates": [{{"name": "employee name", "reason": "brief reason"}}]}}"""

    async def suggest_candidates(
        self,
        candidates: list[PromotionCandidate],
        number_of_suggestions: int = DEFAULT_SUGGESTIONS,
    ) -> PromotionSuggestionResult:
        """
        Ask the model for the best promotion candidates.

        Returns an unsuccessful result instead of raising.
        """
        try:
            if not candidates:
                raise PromotionAgentError("At least one employee is required.")
            if number_of_suggestions < 1:
                raise PromotionAgentError("Number of suggestions must be at least 1.")

            prompt = self.build_prompt(candidates, number_of_suggestions)
            response = await self._model.generate_content_async(prompt)
            suggestions = self._parse_response(response.text, candidates)

        except Exception as e:
            message = str(e) or UNKNOWN_ERROR
            logger.warning("promotion_suggestion_failed", error=message)
            return PromotionSuggestionResult(
                success=False,
                error=f"AI analysis failed: {message}",
            )

        logger.info(
            "promotion_suggested",
            candidates=len(candidates),
            suggestions=len(suggestions),
        )
        return PromotionSuggestionResult(
            success=True,
            suggestions=suggestions[:number_of_suggestions],
        )

    def _parse_response(
        self,
        text: Optional[str],
        candidates: list[PromotionCandidate],
    ) -> list[PromotionSuggestion]:
        text = (text or "").strip()

        # Find JSON in response
        start = text.find("{")
        end = text.rfind("}") + 1
        if start < 0 or end <= start:
            raise PromotionAgentError("The model returned no JSON output.")

        try:
            payload = _SuggestionPayload.model_validate(json.loads(text[start:end]))
        except (json.JSONDecodeError, ValidationError) as e:
            raise PromotionAgentError(f"The model returned malformed output: {e}") from e

        known = {c.name.strip().lower() for c in candidates}
        suggestions = [
            s for s in payload.candidates if s.name.strip().lower() in known
        ]
        if not suggestions:
            raise PromotionAgentError("The model suggested no known employees.")
        return suggestions
