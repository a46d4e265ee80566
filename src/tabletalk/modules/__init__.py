"""TableTalk Modules - All application modules."""
