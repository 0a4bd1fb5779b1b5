"""Prompt templates for rewriting raw items into Telugu news cards."""

from typing import Optional

NEWS_CARD_SYSTEM_PROMPT = """Role: Senior Editor at a Telugu short-news app (Way2News/Inshorts style).
Task: Rewrite the provided input into a "Short News Card"."""

NEWS_CARD_GUIDELINES = """=========================================
STRICT GUIDELINES
=========================================

1. HEADLINE (Title):
   - Must be PUNCHY and CLICKABLE.
   - Structure: [statement]: [person].
   - Example: "కృష్ణా జలాలు వైఎస్సార్‌ పుణ్యమే: వైఎస్‌ అవినాష్‌రెడ్డి"
   - Length: Max 8-10 words.
   - Language: Natural spoken Telugu (Vyavaharika Bhasha).

2. SUMMARY (Body):
   - {summary_rule}
   - Flow:
     * Sentence 1: Direct lead (What happened?).
     * Sentence 2: Key details (Why/Where/When?), mention any statistical data.
     * Sentence 3: Outcome or what's next. If a person speaks, use indirect speech.
   - Tone: {tone}
   - Vocabulary: Simple Telugu. Common English terms (CM, Police, Court) may stay in English.

3. METADATA:
   - Category: Pick one [{categories}].
   - Slug: A short English phrase for image search (e.g., "cm jagan delhi tour").

=========================================
OUTPUT FORMAT (JSON ONLY - NO MARKDOWN)
=========================================
{{
  "title": "Telugu Title Here",
  "summary": "The 60-word summary text here...",
  "category": "English Category",
  "slug_en": "english-slug-here"
}}"""

# Style variants carried by queue items (prompt_type)
PROMPT_STYLES = {
    "NEWS_ARTICLE": {
        "summary_rule": "Length: Strictly 60 to 75 words. Single paragraph. NO bullet points.",
        "tone": "Fast-paced, factual, and easy to read.",
    },
    "DETAILED": {
        "summary_rule": "Length: 60 to 80 words. Single paragraph, detailed and neutral.",
        "tone": "Neutral newspaper report, third person only.",
    },
    "BREAKING": {
        "summary_rule": "5-6 sharp points written as a single string.",
        "tone": "Urgent and authoritative (words like 'ఆదేశం', 'సీరియస్').",
    },
    "CRIME": {
        "summary_rule": "Length: 60 to 70 words. Narrative format (who, what, investigation status).",
        "tone": "Suspenseful, detailed, empathetic.",
    },
    "SHORT": {
        "summary_rule": "Exactly 60 words.",
        "tone": "Neutral, factual, direct.",
    },
}

DEFAULT_PROMPT_STYLE = "NEWS_ARTICLE"


def build_news_card_prompt(
    text: str,
    context: Optional[str] = None,
    prompt_type: Optional[str] = None,
    categories: Optional[list] = None,
) -> str:
    style = PROMPT_STYLES.get((prompt_type or "").upper(), PROMPT_STYLES[DEFAULT_PROMPT_STYLE])
    guidelines = NEWS_CARD_GUIDELINES.format(
        summary_rule=style["summary_rule"],
        tone=style["tone"],
        categories=", ".join(categories or ["Politics", "Cinema", "Sports", "Crime", "Business", "Technology", "General"]),
    )

    parts = [f'Input Text: "{text}"']
    if context:
        parts.append(f"Context: {context}")
    parts.append(guidelines)
    return "\n\n".join(parts)
