"""Tests for recovering answers from model output."""
from __future__ import annotations

from formscan.agent.parsing import parse_answers, strip_code_fence


class TestStripCodeFence:
    def test_json_fence(self) -> None:
        assert strip_code_fence('```json\n[1]\n```') == "[1]"

    def test_plain_fence(self) -> None:
        assert strip_code_fence('```\n[1]\n```') == "[1]"

    def test_no_fence(self) -> None:
        assert strip_code_fence("  [1] ") == "[1]"


class TestParseAnswers:
    def test_plain_json_array(self) -> None:
        answers = parse_answers(
            '[{"Identifier": "a", "Type": "text", "Value": "Jane"},'
            ' {"Identifier": "b", "Type": "email", "Value": "j@x.io"}]'
        )
        assert [(a.identifier, a.value) for a in answers] == [("a", "Jane"), ("b", "j@x.io")]

    def test_fenced_json(self) -> None:
        answers = parse_answers('```json\n[{"Identifier": "a", "Value": "x"}]\n```')
        assert answers[0].identifier == "a"

    def test_answers_wrapper_object(self) -> None:
        answers = parse_answers('{"answers": [{"Identifier": "a", "Value": "x"}]}')
        assert [a.identifier for a in answers] == ["a"]

    def test_single_object(self) -> None:
        answers = parse_answers('{"Identifier": "a", "Type": "text", "Value": "x"}')
        assert [a.identifier for a in answers] == ["a"]

    def test_array_recovered_from_prose(self) -> None:
        content = (
            "Here are the answers you asked for:\n"
            '[{"Identifier": "a", "Type": "text", "Value": "x"}]\n'
            "Let me know if you need anything else."
        )
        answers = parse_answers(content)
        assert [a.identifier for a in answers] == ["a"]

    def test_non_json_yields_empty(self) -> None:
        assert parse_answers("I'm sorry, I can't fill out this form.") == []

    def test_broken_array_yields_empty(self) -> None:
        assert parse_answers('Answers: [{"Identifier": "a", "Value": ] oops') == []

    def test_entries_without_identifier_skipped(self) -> None:
        answers = parse_answers('[{"Value": "x"}, "junk", {"Identifier": "b", "Value": "y"}]')
        assert [a.identifier for a in answers] == ["b"]

    def test_unexpected_json_shape(self) -> None:
        assert parse_answers('"just a string"') == []
        assert parse_answers('{"foo": 1}') == []
