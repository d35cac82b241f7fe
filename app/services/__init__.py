"""Résumé extraction services: document text, prompts, Gemini, reply parsing."""
