"""Tests for ClaudeFiller with a mocked Anthropic client."""
from __future__ import annotations

import json
import re
from datetime import date
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest
from anthropic import APIConnectionError

from formscan.agent.claude import ClaudeFiller
from formscan.agent.prompts import SYSTEM_PROMPT
from formscan.extractor.models import FieldDescriptor, FieldOption


def make_response(text: str, input_tokens: int = 100, output_tokens: int = 20) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(type="text", text=text)]
    response.usage = MagicMock(input_tokens=input_tokens, output_tokens=output_tokens)
    return response


def prompt_identifiers(kwargs: dict[str, Any]) -> list[str]:
    content = kwargs["messages"][0]["content"]
    return re.findall(r'"Identifier": "([^"]+)"', content)


def echo_answers(**kwargs: Any) -> MagicMock:
    """Answer every field in the prompt with its identifier upper-cased."""
    answers = [
        {"Identifier": ident, "Type": "text", "Value": ident.upper()}
        for ident in prompt_identifiers(kwargs)
    ]
    return make_response(json.dumps(answers))


@pytest.fixture
def client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def fields() -> list[FieldDescriptor]:
    return [
        FieldDescriptor(label="First name", required=True, type="text", identifier="first"),
        FieldDescriptor(label="Last name", type="text", identifier="last"),
        FieldDescriptor(
            label="Country",
            type="select",
            identifier="country",
            options=[FieldOption(optionId="US", optionText="USA")],
        ),
    ]


class TestFill:
    def test_single_batch(self, client: MagicMock, fields: list[FieldDescriptor]) -> None:
        client.messages.create.side_effect = echo_answers
        filler = ClaudeFiller(client=client, chunk_size=10)

        result = filler.fill(fields, "Jane Doe, from the US")

        assert client.messages.create.call_count == 1
        assert {a.identifier for a in result.answers} == {"first", "last", "country"}
        assert result.batches == 1

    def test_request_uses_system_prompt_and_model(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        client.messages.create.side_effect = echo_answers
        ClaudeFiller(model="claude-test", max_tokens=123, client=client).fill(fields, "ctx")

        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-test"
        assert kwargs["max_tokens"] == 123
        assert kwargs["system"] == SYSTEM_PROMPT

    def test_reference_date_in_prompt(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        client.messages.create.side_effect = echo_answers
        ClaudeFiller(client=client).fill(fields, "ctx", reference_date=date(2024, 3, 1))

        content = client.messages.create.call_args.kwargs["messages"][0]["content"]
        assert "2024-03-01" in content

    def test_chunks_issue_one_request_each(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        client.messages.create.side_effect = echo_answers
        filler = ClaudeFiller(client=client, chunk_size=2, max_workers=2)

        result = filler.fill(fields, "ctx")

        assert client.messages.create.call_count == 2
        batches = sorted(
            prompt_identifiers(call.kwargs) for call in client.messages.create.call_args_list
        )
        assert batches == [["country"], ["first", "last"]]
        assert sorted(a.identifier for a in result.answers) == ["country", "first", "last"]

    def test_tracks_token_cost(self, client: MagicMock, fields: list[FieldDescriptor]) -> None:
        client.messages.create.side_effect = echo_answers
        filler = ClaudeFiller(
            client=client,
            chunk_size=2,
            input_price_per_mtok=3.0,
            output_price_per_mtok=15.0,
        )

        result = filler.fill(fields, "ctx")

        assert result.usage.requests == 2
        assert result.usage.input_tokens == 200
        assert result.usage.output_tokens == 40
        assert result.cost_usd == pytest.approx((200 * 3.0 + 40 * 15.0) / 1_000_000)

    def test_accepts_serialized_fields(self, client: MagicMock) -> None:
        client.messages.create.side_effect = echo_answers
        payload = [{"Label": "City", "Required": "no", "Type": "text", "Identifier": "city"}]

        result = ClaudeFiller(client=client).fill(payload, "ctx")

        assert [a.identifier for a in result.answers] == ["city"]

    def test_no_fields_makes_no_request(self, client: MagicMock) -> None:
        result = ClaudeFiller(client=client).fill([], "ctx")
        assert result.answers == []
        client.messages.create.assert_not_called()

    def test_option_id_answer_resolved_to_text(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        client.messages.create.return_value = make_response(
            '[{"Identifier": "country", "Type": "select", "Value": "US"}]'
        )
        result = ClaudeFiller(client=client).fill(fields, "ctx")
        assert result.answers[0].value == "USA"


class TestFailures:
    def test_malformed_response_yields_empty_batch(self, client: MagicMock) -> None:
        client.messages.create.return_value = make_response("Sure! The first name is Jane.")
        fields = [
            FieldDescriptor(type="text", identifier="first"),
            FieldDescriptor(type="text", identifier="last"),
        ]

        result = ClaudeFiller(client=client).fill(fields, "ctx")

        assert result.answers == []
        assert result.usage.requests == 1

    def test_api_error_yields_empty_batch(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")

        def fail_country_batch(**kwargs: Any) -> MagicMock:
            if "country" in prompt_identifiers(kwargs):
                raise APIConnectionError(request=request)
            return echo_answers(**kwargs)

        client.messages.create.side_effect = fail_country_batch
        result = ClaudeFiller(client=client, chunk_size=2).fill(fields, "ctx")

        assert sorted(a.identifier for a in result.answers) == ["first", "last"]

    def test_unknown_identifiers_removed(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        client.messages.create.return_value = make_response(
            '[{"Identifier": "first", "Value": "Jane"},'
            ' {"Identifier": "invented", "Value": "x"}]'
        )
        result = ClaudeFiller(client=client).fill(fields, "ctx")
        assert [a.identifier for a in result.answers] == ["first"]

    def test_empty_content(self, client: MagicMock, fields: list[FieldDescriptor]) -> None:
        response = make_response("")
        response.content = []
        client.messages.create.return_value = response

        assert ClaudeFiller(client=client).fill(fields, "ctx").answers == []

    def test_non_text_blocks_are_skipped(
        self, client: MagicMock, fields: list[FieldDescriptor]
    ) -> None:
        response = make_response('[{"Identifier": "first", "Value": "Jane"}]')
        thinking = MagicMock(type="thinking", spec=["type", "thinking"])
        response.content.insert(0, thinking)
        client.messages.create.return_value = response

        result = ClaudeFiller(client=client).fill(fields, "ctx")
        assert [a.identifier for a in result.answers] == ["first"]

    def test_only_tool_use_block(self, client: MagicMock, fields: list[FieldDescriptor]) -> None:
        response = make_response("")
        response.content = [MagicMock(type="tool_use", spec=["type", "name", "input"])]
        client.messages.create.return_value = response

        result = ClaudeFiller(client=client).fill(fields, "ctx")
        assert result.answers == []
        assert result.usage.input_tokens == 100
