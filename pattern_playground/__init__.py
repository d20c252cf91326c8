"""Pattern Playground UI package.

Kept outside `llm_patterns` so the rendering layer only reads orchestrator
state and triggers its operations:
- `llm_patterns`: patterns, providers, orchestration, configuration.
- `pattern_playground`: the comparison window.
"""
