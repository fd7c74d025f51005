"""Review verdict model."""

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class ReviewVerdict:
    """Structured answer returned by the review model."""

    lgtm: bool
    review_comment: str = ""

    @classmethod
    def approved(cls) -> "ReviewVerdict":
        """Verdict used when there is nothing to comment on."""
        return cls(lgtm=True, review_comment="")

    @classmethod
    def needs_attention(cls, text: str) -> "ReviewVerdict":
        """Verdict for a response that could not be parsed.

        The raw model output is kept so a human can read it.
        """
        return cls(lgtm=False, review_comment=text)

    @classmethod
    def from_json(cls, content: str) -> "ReviewVerdict":
        """Parse a verdict from the model's JSON answer.

        Args:
            content: Raw text content of the completion.

        Returns:
            ReviewVerdict instance.

        Raises:
            ValueError: If the content is not a JSON object with a boolean
                ``lgtm`` and a string ``review_comment``.
        """
        data = json.loads(content)  # JSONDecodeError is a ValueError

        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        lgtm = data.get("lgtm")
        if not isinstance(lgtm, bool):
            raise ValueError(f"'lgtm' must be a boolean, got {lgtm!r}")

        review_comment = data.get("review_comment")
        if review_comment is None:
            review_comment = ""
        elif not isinstance(review_comment, str):
            raise ValueError(f"'review_comment' must be a string, got {review_comment!r}")

        return cls(lgtm=lgtm, review_comment=review_comment)

    @property
    def requests_changes(self) -> bool:
        """Whether the verdict carries feedback that should be posted."""
        return not self.lgtm and bool(self.review_comment)
