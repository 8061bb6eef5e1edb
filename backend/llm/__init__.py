"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Send a single prompt to the Groq chat completion API and return its text.
- Pull the JSON payload out of a model reply that may be wrapped in a
  Markdown code fence.
"""
