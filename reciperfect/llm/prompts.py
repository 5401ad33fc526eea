"""Prompt templates for LLM-backed recipe line translation."""

from __future__ import annotations


class PromptLibrary:
    """Build prompt strings for line translation."""

    def translation_system_prompt(self) -> str:
        """Return deterministic system prompt for strict recipe line translation."""

        return (
            "You translate single lines scanned from printed recipes. "
            "Keep quantities, units, and numbers exactly as written. "
            "Return only the translated line with no commentary or quotes."
        )

    def translate_prompt(
        self, source_text: str, source_language: str, target_language: str
    ) -> str:
        """Return translation prompt text for one line."""

        if source_language == "auto":
            source_clause = "Detect the source language of the line"
        else:
            source_clause = f"The line is written in `{source_language}`"
        return (
            f"{source_clause} and translate it into `{target_language}`.\n\n"
            f"{source_text}"
        )
