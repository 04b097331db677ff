"""Prompt templates for each bridge operation."""

from __future__ import annotations

DEFAULT_STYLE = "concise"
DEFAULT_CATEGORIES = ["positive", "negative", "neutral"]
ALL_FIELDS = "all key information"

_STYLE_INSTRUCTIONS = {
    "concise": "concise",
    "detailed": "detailed",
    "bullet": "as a bulleted list",
    "key_points": "as key points",
}


def style_instruction(style: str) -> str:
    return _STYLE_INSTRUCTIONS.get(style, _STYLE_INSTRUCTIONS[DEFAULT_STYLE])


def build_alternatives_prompt(text: str, count: int) -> str:
    return (
        "You are an expert copywriter.\n"
        f"Generate exactly {count} distinct alternatives for the following text.\n"
        "Do not add any extra commentary, numbering, or bullet points. "
        "Each alternative must be on a new line.\n"
        "\n"
        f'Text: "{text}"'
    )


def build_summary_prompt(text: str, style: str) -> str:
    return (
        "You are a text summarization expert. Your task is to summarize the following text.\n"
        f"The desired style is {style_instruction(style)}.\n"
        "Provide only the summary without any introduction or conclusion.\n"
        "\n"
        "Text to summarize:\n"
        "---\n"
        f"{text}\n"
        "---"
    )


def build_extraction_prompt(text: str, fields: list[str] | None) -> str:
    field_list = ", ".join(fields) if fields is not None else ALL_FIELDS
    return (
        "Analyze the following text and extract the specified information.\n"
        f"Return the result as a single, valid JSON object with the following keys: [{field_list}].\n"
        "If a field is not found in the text, its value in the JSON should be null.\n"
        "\n"
        "Text:\n"
        "---\n"
        f"{text}\n"
        "---\n"
        "\n"
        "JSON Output:"
    )


def build_classification_prompt(text: str, categories: list[str]) -> str:
    return (
        "You are a text classification model. Analyze the following text and classify it "
        f"according to these categories: [{', '.join(categories)}].\n"
        "Your response must be a single, valid JSON object where keys are the category names "
        "and values are confidence scores between 0.0 and 1.0.\n"
        "\n"
        "Text to classify:\n"
        f'"{text}"\n'
        "\n"
        "JSON Output:"
    )


def build_suggestions_prompt(context: str, max_suggestions: int) -> str:
    return (
        f"Based on the following context, provide exactly {max_suggestions} relevant and helpful suggestions.\n"
        "Do not number them or add any extra text. Each suggestion should be on a new line.\n"
        "\n"
        "Context:\n"
        f'"{context}"'
    )


def build_structured_prompt(request: str) -> str:
    return (
        "Your task is to respond to the user's request by providing the information in a valid JSON format.\n"
        "Based on the user's request, determine the appropriate JSON structure.\n"
        "\n"
        f'User Request: "{request}"\n'
        "\n"
        "JSON Output:"
    )


def build_list_prompt(request: str) -> str:
    return (
        "Generate a list of items based on the following request.\n"
        "Each item must be on a new line. Do not include numbering, bullet points, or any other formatting.\n"
        "\n"
        f"Request: {request}"
    )
