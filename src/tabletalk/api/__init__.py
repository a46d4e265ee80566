"""TableTalk API - Cross-cutting HTTP routes."""
