"""LLM integration layer.

- No prompt/output logging (prompts embed contact details).
- Configured via environment variables (see app.core.settings).
- Stateless: one HTTP request per completion, no retries.
"""
