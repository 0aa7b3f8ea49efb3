"""Prompt templates for the Claude form filler."""
import json
from typing import Any

SYSTEM_PROMPT = """You are filling out a job application form on behalf of a candidate.

You receive a JSON list of form fields and the candidate's resume or other
free-text context. Answer each field using ONLY facts found in the context.

## FIELD FORMAT

Each field has:
- "Label": the question shown to the candidate (may be empty)
- "Required": "yes" or "no"
- "Type": text, email, number, tel, textarea, select, radio, checkbox, date, file
- "Identifier": the key you must echo back
- "options": for select/radio/checkbox, the only acceptable choices
- "Components": for composite dates, the Day/Month/Year sub-identifiers

## RULES

1. Use ONLY Identifiers from the provided fields. Never invent Identifiers.
2. For select, radio and checkbox fields, the Value MUST be the exact
   optionText of one provided option.
3. For date fields, use YYYY-MM-DD. Resolve relative dates ("currently",
   "2 years ago") against the reference date.
4. For number fields, return digits only.
5. Skip file fields.
6. Skip fields the context does not answer. Do not guess personal data.
7. Return each Identifier at most once.

## OUTPUT FORMAT

Return ONLY a JSON array, no markdown, no commentary:
[
    {"Identifier": "first_name", "Type": "text", "Value": "Jane"},
    {"Identifier": "country", "Type": "select", "Value": "United States"}
]

If no field can be answered, return []."""


def build_fill_prompt(fields: list[dict[str, Any]], context: str, reference_date: str) -> str:
    """Build user prompt with one batch of fields and the candidate context."""
    return f"""Fill out these form fields.

## REFERENCE DATE
{reference_date}

## FORM FIELDS
{json.dumps(fields, indent=2)}

## CANDIDATE CONTEXT
{context.strip()}

Return ONLY the JSON array of {{"Identifier", "Type", "Value"}} objects."""
