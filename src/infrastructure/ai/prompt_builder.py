"""
Prompt Builder - Prompts for reading contact details out of CVs.
"""

from dataclasses import dataclass


@dataclass
class PromptResult:
    """Result of prompt construction."""
    system_prompt: str
    user_prompt: str


class PromptBuilder:
    """
    Builds prompts asking the AI to extract candidate contact details.

    CVs are mostly Hebrew or English; Israeli phone numbers are expected.
    """

    SYSTEM_PROMPT = """You extract contact details from candidate CVs.

You will receive the plain text of a CV (Hebrew or English).

Rules:
- Return the candidate's own full name, email address and phone number
- Never invent values; use null when a value is not present in the text
- Ignore referees' and employers' contact details
- Keep the name in the language it appears in the CV

You MUST respond ONLY with valid JSON, no additional text, using the schema:
{"name": string | null, "email": string | null, "phone": string | null}"""

    MAX_CV_CHARS = 6000

    def build_for_contact_extraction(self, cv_text: str) -> PromptResult:
        """
        Build prompt for contact extraction.

        Args:
            cv_text: Extracted CV text (truncated to MAX_CV_CHARS).

        Returns:
            PromptResult with system and user prompts.
        """
        text = cv_text.strip()[: self.MAX_CV_CHARS]
        return PromptResult(
            system_prompt=self.SYSTEM_PROMPT,
            user_prompt=f"--- CV ---\n{text}\n--- END CV ---",
        )
