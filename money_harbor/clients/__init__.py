"""
HTTP clients for the external services MoneyHarbor talks to.

Modules
-------
llm_client   : LLMClient — OpenAI-compatible chat completions (JSON mode).
email_client : BrevoEmailClient — transactional email with attachments.

Both accept an injected ``httpx.Client`` so tests can run against
``httpx.MockTransport`` without network access.
"""
