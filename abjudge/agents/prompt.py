from abjudge.models.request import AnalysisMode

GENERIC_CONTEXT = "General commercial scenario"

LANGUAGE_NAMES = {
    "en": "English",
    "zh": "Simplified Chinese",
}

_MODE_NAMES = {
    AnalysisMode.TEXT: "copy comparison",
    AnalysisMode.VISUAL: "visual / image comparison",
}


def build_prompt(mode: AnalysisMode, context: str, labels: list[str], language: str = "en") -> str:
    """Build the instruction block appended after the variant parts.

    Deterministic: the same arguments always produce the same text.
    """
    count = len(labels)
    joined = ", ".join(labels)
    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])

    lines = [
        "You are a senior marketing strategist, consumer psychologist and lead UI/UX "
        "designer with more than 15 years of experience.",
        "",
        f'Business context: "{context.strip() or GENERIC_CONTEXT}"',
        f"Test mode: {_MODE_NAMES[mode]}",
        f"Number of variants: {count} ({joined})",
        "",
        "Instructions:",
        f"1. Compare these {count} variants in depth.",
        "2. Using conversion-rate optimization (CRO) principles, visual hierarchy, "
        "cognitive load theory and the psychology of persuasion, pick the variant "
        "most likely to win a live A/B test. "
        f'Answer "Tie" only if no variant is clearly ahead.',
        "3. Give every variant a score from 0 to 100 and list its key strengths (pros) "
        "and its likely drop-off risks (cons), at least one of each.",
        "4. Score visual appeal, copy persuasion and conversion potential across the "
        "whole set from 0 to 100, each with a short comment.",
        "5. Combine the best elements of all variants into one optimized final "
        "recommendation and explain why it should outperform them.",
        "",
        "Output rules:",
        f"- Write every text field in {language_name}. No text field may be left empty.",
        f"- variantDetails must contain exactly one entry for each of these labels: {joined}.",
        f'- winner must be one of {joined}, or "Tie".',
        "- Scores are integers between 0 and 100.",
        "- The response must be valid JSON.",
    ]
    return "\n".join(lines)
