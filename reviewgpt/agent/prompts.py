"""Prompt templates for the review model."""

JSON_FORMAT_REQUIREMENT = """
Provide your feedback in a strict JSON format with the following structure:
{
  "lgtm": boolean, // true if the code looks good to merge, false if there are concerns
  "review_comment": string // Your detailed review comments. You can use markdown syntax \
in this string, but the overall response must be a valid JSON
}
Ensure your response is a valid JSON object.
"""

LANGUAGE_DIRECTIVE = "Answer me in {language},"


def build_review_prompt(patch: str, instruction: str, language: str | None = None) -> str:
    """Build the user message sent to the review model.

    Args:
        patch: The assembled patch to review.
        instruction: Review instruction, e.g. what to focus on.
        language: Optional language the answer should be written in.

    Returns:
        The formatted prompt.
    """
    answer_language = LANGUAGE_DIRECTIVE.format(language=language) if language else ""

    return f"{instruction}{JSON_FORMAT_REQUIREMENT} {answer_language}:\n{patch}\n"
