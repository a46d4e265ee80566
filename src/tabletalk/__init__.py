"""TableTalk - Conversational analysis of uploaded tabular datasets."""

__version__ = "0.1.0"
