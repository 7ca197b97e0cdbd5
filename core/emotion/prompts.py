"""
Prompt templates for intensity scoring and letter writing.

Pure functions that build the prompts sent to the text-generation backend.
No I/O, no side effects. Prompts are written in Korean, the language of the
letterbox's users; the emotion kinds are translated with ``EMOTION_LABELS``.
"""

from core.emotion.types import EmotionLog

EMOTION_LABELS: dict[str, str] = {
    "happy": "기쁨",
    "sad": "슬픔",
    "anxious": "불안",
    "excited": "설렘",
    "calm": "평온",
    "angry": "화남",
}

LETTER_GREETING = "안녕, 나야"

LETTER_SYSTEM_PROMPT = (
    "당신은 따뜻하고 이해심 많은 AI 상담사입니다. "
    "사용자의 감정에 공감하며 개인화된 편지를 작성합니다."
)


def emotion_label(kind: str) -> str:
    """Return the localized label for *kind*, or *kind* itself if unmapped."""
    return EMOTION_LABELS.get(kind, kind)


def build_scoring_prompt(text: str, kind: str) -> str:
    """Build the prompt asking the model to rate emotion intensity.

    The model is told to answer with digits only so the reply can be parsed
    by stripping every non-digit character.

    Args:
        text: The user's raw description. Embedded verbatim.
        kind: Emotion kind being rated.

    Returns:
        The complete user prompt string.
    """
    return (
        f"다음 텍스트에서 {emotion_label(kind)}의 강도를 0-100 점수로 평가해주세요.\n"
        f'텍스트: "{text}"\n'
        "\n"
        "점수만 숫자로만 응답해주세요 (예: 75)."
    )


def build_letter_prompt(log: EmotionLog) -> str:
    """Build the user prompt for a comfort letter.

    The letter must open with ``LETTER_GREETING``, acknowledge the named
    emotion and its intensity, and reference what the user wrote.

    Args:
        log: The emotion log the letter responds to.

    Returns:
        The complete user prompt string.
    """
    return f"""\
사용자가 다음과 같은 감정을 표현했습니다:
- 감정: {emotion_label(log.emotion.kind)}
- 감정 강도: {log.emotion.intensity}%
- 내용: {log.text}

이 감정을 바탕으로 사용자에게 쓰는 따뜻하고 위로와 격려가 담긴 편지를 작성해주세요.
편지는 "{LETTER_GREETING}"로 시작하고, 사용자의 현재 감정을 인정하면서 앞으로를 응원하는 내용으로 작성해주세요.
개인적인 톤으로 작성하고, 감동적이고 따뜻한 메시지를 전달해주세요."""
