"""LLM streaming layer: upstream client, SSE models and relay session primitives."""
