"""Templated coaching feedback derived from SpeechMetrics"""

from dataclasses import dataclass

from .metrics import SpeakingPace, SpeechMetrics, most_common_filler, round_half_up

ENCOURAGEMENT = (
    "With practice, you can continue to refine your speaking skills "
    "and deliver even more impactful speeches."
)
DEFAULT_POSITIVE = "Thank you for recording your speech. "

FEW_PAUSES_PER_MINUTE = 2
MANY_PAUSES_PER_MINUTE = 8
LOW_FILLER_PERCENT = 2
MODERATE_FILLER_PERCENT = 5
EXCELLENT_CLARITY = 85
GOOD_CLARITY = 70


@dataclass(frozen=True)
class SpeechFeedback:
    positive: str
    improvement: str
    suggestion: str
    encouragement: str = ENCOURAGEMENT


def generate_feedback(metrics: SpeechMetrics) -> SpeechFeedback:
    positive = ""
    improvement = ""
    suggestion = ""

    wpm = round_half_up(metrics.words_per_minute)
    pace = metrics.pace
    if pace is SpeakingPace.MODERATE:
        positive += f"Your speaking pace is well-balanced at {wpm} words per minute. "
    elif pace is SpeakingPace.SLOW:
        improvement += f"Your speaking pace is a bit slow at {wpm} words per minute. "
        suggestion += "Try to increase your speaking rate slightly to improve engagement. "
    else:
        improvement += f"Your speaking pace is a bit fast at {wpm} words per minute. "
        suggestion += (
            "Consider slowing down slightly to improve clarity and allow "
            "listeners to better process your message. "
        )

    if metrics.filler_word_percentage <= LOW_FILLER_PERCENT:
        positive += (
            "You used very few filler words, which makes your speech "
            "sound confident and polished. "
        )
    elif metrics.filler_word_percentage <= MODERATE_FILLER_PERCENT:
        positive += "You used a reasonable amount of filler words. "
    else:
        improvement += (
            f"You used filler words at a rate of "
            f"{metrics.filler_word_percentage:.1f}% of your total words. "
        )
        top_filler = most_common_filler(metrics.filler_word_counts)
        if top_filler:
            improvement += f'Your most frequently used filler word was "{top_filler}". '
            suggestion += "Try to replace filler words with brief pauses to sound more confident. "

    if metrics.pauses_per_minute < FEW_PAUSES_PER_MINUTE:
        improvement += "You had very few pauses in your speech. "
        suggestion += (
            "Consider adding strategic pauses to emphasize key points and "
            "give listeners time to process information. "
        )
    elif metrics.pauses_per_minute > MANY_PAUSES_PER_MINUTE:
        improvement += "Your speech contained many pauses. "
        suggestion += (
            "Try to use pauses more strategically and keep your thoughts "
            "more connected. "
        )
    else:
        positive += "You used pauses effectively throughout your speech. "

    score = metrics.clarity_score
    if score >= EXCELLENT_CLARITY:
        positive += f"Your overall clarity score is excellent at {score}/100. "
    elif score >= GOOD_CLARITY:
        positive += f"Your overall clarity score is good at {score}/100. "
    else:
        improvement += (
            f"Your overall clarity score is {score}/100, which has room for improvement. "
        )
        suggestion += (
            "Focus on reducing filler words and using a more consistent pace "
            "to improve clarity. "
        )

    return SpeechFeedback(
        positive=positive or DEFAULT_POSITIVE,
        improvement=improvement,
        suggestion=suggestion,
    )
