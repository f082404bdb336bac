"""
Fallback Responses
Deterministic replies used when the upstream backend cannot answer or when a
generated reply is unsafe to show.
"""
import zlib
from typing import Dict, List, Tuple


# (topic keywords, candidate replies)
FALLBACK_TOPICS: List[Tuple[Tuple[str, ...], List[str]]] = [
    (
        ("stress", "anxious", "worried", "nervous", "panic"),
        [
            "I understand you're feeling stressed. That's a very common experience, especially during challenging times. Can you tell me what's contributing most to your stress right now?",
            "Stress can feel overwhelming, but you're taking a positive step by talking about it. What specific situations or thoughts are causing you the most anxiety?",
            "It sounds like you're dealing with a lot of stress. What usually helps you feel more calm and centered?",
        ],
    ),
    (
        ("sad", "depressed", "down", "hopeless", "empty"),
        [
            "I hear that you're feeling really down right now. Those feelings are valid and it's important that you're reaching out. What's been weighing on your mind lately?",
            "Feeling sad can be incredibly difficult. You're not alone in this. Can you share what's been making you feel this way?",
            "Thank you for trusting me with how you're feeling. What would feel most helpful for you right now?",
        ],
    ),
    (
        ("exam", "study", "school", "grade", "college"),
        [
            "Academic pressure can be really intense. It's normal to feel overwhelmed by exams and studies. What part of your work is causing you the most stress?",
            "I understand that school can feel overwhelming sometimes. You're not alone in feeling this way. What would help you feel more prepared?",
        ],
    ),
    (
        ("sleep", "tired", "insomnia", "exhausted"),
        [
            "Sleep issues can really affect how we feel during the day. Getting good rest matters for your wellbeing. What's been interfering with your sleep?",
            "Trouble sleeping can make everything else feel harder. What thoughts tend to keep you up at night?",
        ],
    ),
    (
        ("friend", "relationship", "lonely", "alone", "family"),
        [
            "Feeling lonely or having relationship troubles can be really painful. You're brave for reaching out. What's been going on that's bothering you?",
            "Human connections are so important for our wellbeing. I'm here to listen. What would you like to talk about?",
        ],
    ),
]

GENERAL_FALLBACKS = [
    "Thank you for sharing with me. I'm here to listen and support you. Can you tell me more about what's on your mind today?",
    "I appreciate you opening up. It's important to talk about how you're feeling. What would be most helpful for you right now?",
    "It takes courage to reach out when you're struggling. I'm glad you're here. What's been the most challenging part of your day?",
]

SAFE_RESPONSES: Dict[str, str] = {
    "stress": "I understand you're dealing with stress right now. That's completely normal. Have you tried taking a few slow, deep breaths? What's been the most challenging part for you?",
    "anxiety": "I hear that you're feeling anxious, and that's a very common experience. Your feelings are valid. Try breathing in slowly for 4 counts, then out for 6. What's been on your mind lately?",
    "sadness": "It takes courage to reach out when you're struggling. Your feelings matter, and you're not alone in this. What's been weighing on you?",
    "loneliness": "Feeling lonely can be really difficult, and I appreciate you sharing that with me. Is there someone you feel comfortable reaching out to?",
    "overwhelm": "It sounds like you're dealing with a lot right now, and feeling overwhelmed is understandable. Let's take this one step at a time. What feels most pressing today?",
    "default": "I understand you're going through something difficult right now. Thank you for sharing with me. Your feelings are valid, and you deserve support. What's been on your mind lately?",
}

SAFE_TOPICS = [
    ("stress", ("stress", "exam", "study")),
    ("anxiety", ("anxious", "worried", "nervous")),
    ("sadness", ("sad", "down", "depressed")),
    ("loneliness", ("lonely", "alone", "isolated")),
    ("overwhelm", ("overwhelmed", "too much", "can't handle")),
]


def _stable_pick(options: List[str], key: str) -> str:
    return options[zlib.crc32(key.encode("utf-8")) % len(options)]


def fallback_response(message: str) -> str:
    """
    Reply used when generation fails. Same message, same reply.

    Args:
        message: The user message the reply answers
    """
    text_lower = (message or "").lower()
    for keywords, replies in FALLBACK_TOPICS:
        if any(k in text_lower for k in keywords):
            return _stable_pick(replies, text_lower)
    return _stable_pick(GENERAL_FALLBACKS, text_lower)


def safe_response(message: str) -> str:
    """Reply used in place of a generated reply that failed safety checks."""
    text_lower = (message or "").lower()
    for topic, keywords in SAFE_TOPICS:
        if any(k in text_lower for k in keywords):
            return SAFE_RESPONSES[topic]
    return SAFE_RESPONSES["default"]
