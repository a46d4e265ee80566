"""TableTalk Assistant Module - Single-endpoint model access."""
