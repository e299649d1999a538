"""Tests for the promotion agent (no real API calls)."""

import asyncio
import json
from datetime import date

from kgb_assistant.agents import (
    PromotionAgent,
    PromotionCandidate,
    candidate_from_record,
)
from kgb_assistant.models.employee import EmployeeRecord


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for a Gemini GenerativeModel."""

    def __init__(self, text=None, error=None):
        self._text = text
        self._error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self._error:
            raise self._error
        return FakeResponse(self._text)


CANDIDATES = [
    PromotionCandidate(name="Andi", years_of_service=12, salary_increase_frequency=2),
    PromotionCandidate(
        name="Budi",
        years_of_service=4.5,
        salary_increase_frequency=1,
        other_criteria="Sertifikasi auditor",
    ),
]


def _answer(*pairs):
    return json.dumps({"candidates": [{"name": n, "reason": r} for n, r in pairs]})


class TestPromotionAgent:
    """Tests for PromotionAgent."""

    def test_parses_suggestions(self):
        model = FakeModel(_answer(("Andi", "Long service"), ("Budi", "Certified")))
        result = asyncio.run(PromotionAgent(model).suggest_candidates(CANDIDATES, 2))

        assert result.success
        assert result.error is None
        assert [s.name for s in result.suggestions] == ["Andi", "Budi"]
        assert result.suggestions[0].reason == "Long service"

    def test_json_wrapped_in_prose(self):
        text = "Here you go:\n```json\n" + _answer(("Andi", "Senior")) + "\n```"
        result = asyncio.run(PromotionAgent(FakeModel(text)).suggest_candidates(CANDIDATES))

        assert result.success
        assert result.suggestions[0].name == "Andi"

    def test_prompt_lists_every_candidate(self):
        model = FakeModel(_answer(("Andi", "Senior")))
        asyncio.run(PromotionAgent(model).suggest_candidates(CANDIDATES, 1))

        prompt = model.prompts[0]
        assert "HR expert" in prompt
        assert "top 1 candidates" in prompt
        assert "- Name: Andi" in prompt
        assert "Years of Service: 4.5" in prompt
        assert "Sertifikasi auditor" in prompt

    def test_result_is_capped_at_requested_number(self):
        model = FakeModel(_answer(("Andi", "a"), ("Budi", "b")))
        result = asyncio.run(PromotionAgent(model).suggest_candidates(CANDIDATES, 1))
        assert len(result.suggestions) == 1

    def test_unknown_names_are_dropped(self):
        model = FakeModel(_answer(("Zaki", "Not on the list"), ("Budi", "b")))
        result = asyncio.run(PromotionAgent(model).suggest_candidates(CANDIDATES))
        assert [s.name for s in result.suggestions] == ["Budi"]

    def test_model_error_is_reported(self):
        model = FakeModel(error=RuntimeError("quota exhausted"))
        result = asyncio.run(PromotionAgent(model).suggest_candidates(CANDIDATES))

        assert not result.success
        assert result.error == "AI analysis failed: quota exhausted"
        assert result.suggestions == []

    def test_non_json_output_is_reported(self):
        result = asyncio.run(
            PromotionAgent(FakeModel("I cannot help with that.")).suggest_candidates(CANDIDATES)
        )
        assert not result.success
        assert result.error.startswith("AI analysis failed: ")

    def test_empty_suggestion_list_is_an_error(self):
        result = asyncio.run(
            PromotionAgent(FakeModel('{"candidates": []}')).suggest_candidates(CANDIDATES)
        )
        assert not result.success

    def test_no_candidates(self):
        model = FakeModel(_answer(("Andi", "a")))
        result = asyncio.run(PromotionAgent(model).suggest_candidates([]))

        assert not result.success
        assert model.prompts == []


class TestCandidateFromRecord:
    """Tests for deriving candidates from stored employees."""

    def test_frequency_counts_reviews_in_last_three_years(self):
        record = EmployeeRecord(
            name="Andi",
            position="Staf",
            national_id="1",
            last_review_date=date(2023, 3, 1),
        )
        candidate = candidate_from_record(record, 10, 1, today=date(2024, 6, 1))

        # 2021-06-01 .. 2024-06-01 holds reviews in 2022 and 2023
        assert candidate.salary_increase_frequency == 2
        assert candidate.years_of_service == 10

    def test_two_year_cycle(self):
        record = EmployeeRecord(
            name="Budi",
            position="Staf",
            national_id="2",
            last_review_date=date(2023, 3, 1),
        )
        candidate = candidate_from_record(
            record, 8, 2, other_criteria="Tugas belajar", today=date(2024, 6, 1)
        )

        assert candidate.salary_increase_frequency == 1
        assert candidate.other_criteria == "Tugas belajar"
