"""
TableTalk Core - Data-query orchestration pipeline.

TabularParser -> Sampler -> PromptBuilder -> ReasoningClient -> ResponseInterpreter,
coordinated by QueryOrchestrator.
"""
