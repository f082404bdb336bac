"""
Prompts
System prompt and bounded message construction for the generation backend.
"""
from typing import Dict, List, Sequence

from config import DEFAULT_LANGUAGE, MAX_HISTORY_TURN_CHARS, MAX_PROMPT_CHARS, SUPPORTED_LANGUAGES


SYSTEM_PROMPT = """You are Solace, a compassionate mental health support companion for students. Your role is to provide empathetic, supportive responses that validate feelings and offer practical help.

CORE PRINCIPLES:
- Always acknowledge and validate their feelings first
- Use supportive language like "I understand", "I hear you", "That sounds difficult"
- Offer practical, actionable advice they can use immediately
- Keep responses warm, caring, and conversational (2-4 sentences)
- Ask at most ONE follow-up question to show engagement

NEVER:
- Diagnose conditions or recommend medication
- Minimize feelings ("just get over it", "others have it worse")
- Start with "As an AI"

FOR CRISIS (suicide/self-harm mentions):
- Express immediate concern
- Provide crisis resources: call or text 988, or text HOME to 741741
- Emphasize that help is available right now

LANGUAGE: Respond in {language}."""


def language_name(language: str) -> str:
    return SUPPORTED_LANGUAGES.get(language, SUPPORTED_LANGUAGES[DEFAULT_LANGUAGE])


def truncate(text: str, limit: int) -> str:
    """Cut text to a character budget on a word boundary where possible."""
    if len(text) <= limit:
        return text
    cut = text[:limit]
    space = cut.rfind(" ")
    if space > limit // 2:
        cut = cut[:space]
    return cut.rstrip() + "..."


def bound_prompt(text: str, limit: int = MAX_PROMPT_CHARS) -> str:
    return truncate(text.strip(), limit)


def build_messages(
    prompt: str,
    history: Sequence = (),
    language: str = DEFAULT_LANGUAGE,
    turn_limit: int = MAX_HISTORY_TURN_CHARS
) -> List[Dict[str, str]]:
    """
    Build the chat message list: system prompt, bounded history, user prompt.

    Args:
        prompt: Current user message (already bounded)
        history: Recent Turns, oldest first
        language: Response language code
        turn_limit: Character budget per history turn
    """
    messages = [{"role": "system", "content": SYSTEM_PROMPT.format(language=language_name(language))}]

    for turn in history:
        if turn.role not in ("user", "assistant"):
            continue
        messages.append({"role": turn.role, "content": truncate(turn.content, turn_limit)})

    messages.append({"role": "user", "content": prompt})
    return messages
