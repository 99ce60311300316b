"""LLM-facing components: mentor chat, summarization and the task judge."""
