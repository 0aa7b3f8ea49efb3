"""formscan: form field extraction and LLM-assisted form filling."""
