"""LLM adapters and the inference gateway."""
