"""Thin adapter over an OpenAI-compatible chat completion endpoint."""

from typing import Any, Sequence

from openai import OpenAI

from telehealth.core import config

HISTORY_LIMIT = 10
TEMPERATURE = 0.7
MAX_TOKENS = 500

SYSTEM_PROMPT = (
    "You are a helpful medical assistant chatbot for a doctor appointment platform. "
    "Your role is to provide general health information and guidance, help users understand "
    "symptoms and when to seek medical care, assist with appointment-related questions, "
    "offer health tips and wellness advice, and answer questions about medical procedures, "
    "treatments and conditions.\n\n"
    "Always remind users that your advice does not replace professional medical diagnosis. "
    "For serious symptoms, recommend consulting a healthcare provider. Be empathetic and "
    "supportive, keep responses concise but informative, and if asked about specific doctors "
    "or appointments, direct users to the platform features."
)


class ChatAssistant:
    def __init__(self, client: Any, model: str) -> None:
        self._client = client
        self._model = model

    def build_messages(self, message: str, history: Sequence[dict[str, str]] = ()) -> list[dict[str, str]]:
        messages = [{'role': 'system', 'content': SYSTEM_PROMPT}]
        for entry in list(history)[-HISTORY_LIMIT:]:
            role = 'user' if entry.get('role') == 'user' else 'assistant'
            messages.append({'role': role, 'content': entry.get('content', '')})
        messages.append({'role': 'user', 'content': message})
        return messages

    def reply(self, message: str, history: Sequence[dict[str, str]] = ()) -> str:
        completion = self._client.chat.completions.create(
            model=self._model,
            messages=self.build_messages(message, history),
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
        )
        return completion.choices[0].message.content or ''


def build_chat_assistant() -> ChatAssistant | None:
    if not config.chatbot_configured():
        return None
    client = OpenAI(api_key=config.OPENROUTER_API_KEY, base_url=config.OPENROUTER_BASE_URL)
    return ChatAssistant(client, config.CHATBOT_MODEL)
