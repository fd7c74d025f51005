"""reviewgpt - pull request review bot backed by an OpenAI-compatible chat model."""

__version__ = "0.1.0"
