"""
Tests for the response parser.

Tests JSON extraction from model replies, issue validation and the effort
and fix reply formats.
"""

import json

import pytest

from review_assistant.analyzers.response_parser import (
    extract_fixed_code,
    extract_json_object,
    parse_analysis_response,
    parse_effort_response,
)
from review_assistant.models.analysis import ParseOutcome
from review_assistant.models.schemas import IssueSeverity


def _issue(**overrides):
    issue = {
        "line": 4,
        "severity": "MAJOR",
        "category": "bug",
        "title": "Unchecked return value",
        "description": "The result of fetch is never checked",
    }
    issue.update(overrides)
    return issue


class TestExtractJsonObject:
    """Tests for locating the JSON object in a reply."""

    def test_fenced_json_block(self):
        text = 'Sure!\n```json\n{"issues": []}\n```\nHope this helps.'
        outcome, data = extract_json_object(text)

        assert outcome == ParseOutcome.PARSED
        assert data == {"issues": []}

    def test_plain_fence(self):
        outcome, data = extract_json_object('```\n{"issues": []}\n```')
        assert outcome == ParseOutcome.PARSED

    def test_bare_object_in_prose(self):
        """Test greedy first-brace to last-brace matching."""
        text = 'Analysis: {"issues": [{"a": {"b": 1}}]} end'
        outcome, data = extract_json_object(text)

        assert outcome == ParseOutcome.PARSED
        assert data["issues"][0]["a"] == {"b": 1}

    def test_no_json(self):
        assert extract_json_object("The code looks fine to me.") == (ParseOutcome.NO_JSON, None)

    def test_empty_text(self):
        assert extract_json_object("") == (ParseOutcome.NO_JSON, None)
        assert extract_json_object(None) == (ParseOutcome.NO_JSON, None)

    def test_invalid_json(self):
        outcome, data = extract_json_object("{issues: [oops}")

        assert outcome == ParseOutcome.INVALID_JSON
        assert data is None


class TestParseAnalysisResponse:
    """Tests for parse_analysis_response."""

    def test_text_without_json(self):
        """Test prose yields an empty, well-formed result."""
        result = parse_analysis_response("I could not analyze this code.")

        assert result.outcome == ParseOutcome.NO_JSON
        assert result.issues == []
        assert result.summary.model_dump() == {"critical": 0, "major": 0, "minor": 0, "info": 0}
        assert result.recommendations.model_dump() == {
            "documentation": [],
            "testing": [],
            "architecture": [],
            "cicd": [],
        }

    def test_invalid_json_never_raises(self):
        result = parse_analysis_response('```json\n{"issues": [}\n```')

        assert result.outcome == ParseOutcome.INVALID_JSON
        assert result.issues == []

    def test_issues_not_a_list(self):
        result = parse_analysis_response('{"issues": "none"}')

        assert result.outcome == ParseOutcome.INVALID_SHAPE
        assert result.issues == []

    def test_missing_issues_key(self):
        result = parse_analysis_response('{"summary": {"critical": 0}}')
        assert result.outcome == ParseOutcome.INVALID_SHAPE

    def test_valid_reply(self):
        reply = json.dumps(
            {
                "issues": [_issue(), _issue(line=9, severity="minor", title="Naming")],
                "summary": {"critical": 0, "major": 1, "minor": 1, "info": 0},
                "recommendations": {"testing": ["Add a test for fetch failures"]},
            }
        )

        result = parse_analysis_response(reply)

        assert result.outcome == ParseOutcome.PARSED
        assert [i.title for i in result.issues] == ["Unchecked return value", "Naming"]
        assert result.issues[1].severity == IssueSeverity.MINOR
        assert result.summary.major == 1
        assert result.recommendations.testing == ["Add a test for fetch failures"]

    def test_drops_issue_missing_severity(self):
        """Test one invalid issue is dropped and the others kept."""
        bad = _issue(title="No severity")
        del bad["severity"]

        result = parse_analysis_response(json.dumps({"issues": [_issue(), bad, _issue(line=7)]}))

        assert result.outcome == ParseOutcome.PARSED
        assert len(result.issues) == 2
        assert result.dropped_issues == 1
        assert all(i.title != "No severity" for i in result.issues)

    def test_drops_non_object_issue(self):
        result = parse_analysis_response(json.dumps({"issues": ["line 3 is bad", _issue()]}))

        assert len(result.issues) == 1
        assert result.dropped_issues == 1

    def test_summary_counted_when_missing(self):
        """Test the summary falls back to counting valid issues."""
        reply = json.dumps({"issues": [_issue(severity="CRITICAL"), _issue(severity="INFO")]})

        result = parse_analysis_response(reply)

        assert result.summary.critical == 1
        assert result.summary.info == 1
        assert result.summary.major == 0

    def test_invalid_summary_replaced(self):
        reply = json.dumps({"issues": [_issue()], "summary": {"major": "many"}})

        result = parse_analysis_response(reply)

        assert result.summary.major == 1

    def test_non_list_recommendations_dropped(self):
        reply = json.dumps(
            {"issues": [], "recommendations": {"documentation": "Add docs", "cicd": ["Pin versions"]}}
        )

        result = parse_analysis_response(reply)

        assert result.recommendations.documentation == []
        assert result.recommendations.cicd == ["Pin versions"]

    def test_logs_warning_on_unparsable(self, caplog):
        with caplog.at_level("WARNING", logger="code_review.response_parser"):
            parse_analysis_response("no json here")

        assert "Could not parse model response" in caplog.text


class TestParseEffortResponse:
    """Tests for parse_effort_response."""

    def test_valid_estimate(self):
        reply = '```json\n{"totalEffort": 2.5, "breakdown": [{"issue": "A", "effort": 1.5, "reasoning": "r"}]}\n```'

        estimate = parse_effort_response(reply)

        assert estimate.total_effort == 2.5
        assert estimate.breakdown[0].issue == "A"
        assert estimate.breakdown[0].effort == 1.5

    def test_invalid_breakdown_items_skipped(self):
        reply = json.dumps(
            {"totalEffort": 3, "breakdown": [{"effort": 1}, {"issue": "B", "effort": 2}, "junk"]}
        )

        estimate = parse_effort_response(reply)

        assert [item.issue for item in estimate.breakdown] == ["B"]

    @pytest.mark.parametrize(
        "reply",
        ["no estimate", '{"breakdown": []}', '{"totalEffort": "a lot"}', '{"totalEffort": -2}'],
    )
    def test_unusable_estimate(self, reply):
        assert parse_effort_response(reply) is None


class TestExtractFixedCode:
    """Tests for extract_fixed_code."""

    def test_fixed_code_block(self):
        text = "FIXED_CODE:\n```javascript\nconst x = 1;\n```"
        assert extract_fixed_code(text) == "const x = 1;"

    def test_prefers_fixed_code_block(self):
        text = "Before:\n```js\nvar x = 1;\n```\nFIXED_CODE:\n```js\nconst x = 1;\n```"
        assert extract_fixed_code(text) == "const x = 1;"

    def test_first_fenced_block(self):
        text = "Here you go:\n```python\nx = 1\n```"
        assert extract_fixed_code(text) == "x = 1"

    def test_plain_text(self):
        assert extract_fixed_code("  const x = 1;  \n") == "const x = 1;"
