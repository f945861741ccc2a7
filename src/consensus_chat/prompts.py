"""Prompt builders and user-facing messages.

Provider adapters use the history helpers so every vendor sees the same
conversation; the selection layer uses the synthesis prompt.
"""

from consensus_chat.entities import Turn

RATE_LIMIT_MESSAGE = (
    "You have reached the hourly limit of {limit} requests. "
    "Please consider supporting us with a donation to keep the project alive!"
)

_NO_VALID_RESPONSES = {
    "Italiano": "Mi dispiace, non sono riuscito a ottenere risposte valide dai servizi di intelligenza artificiale.",
    "English": "I'm sorry, I couldn't get any valid responses from the AI services.",
    "Español": "Lo siento, no pude obtener respuestas válidas de los servicios de IA.",
    "Français": "Désolé, je n'ai pu obtenir aucune réponse valide des services d'IA.",
    "Deutsch": "Entschuldigung, ich konnte keine gültigen Antworten von den KI-Diensten erhalten.",
}


def rate_limit_message(limit: int) -> str:
    return RATE_LIMIT_MESSAGE.format(limit=limit)


def no_valid_responses_message(language: str) -> str:
    """Localized "no valid responses" text; unknown languages get English tagged with the language."""
    message = _NO_VALID_RESPONSES.get(language)
    if message is not None:
        return message
    return f"{_NO_VALID_RESPONSES['English']} (in {language})"


def language_instruction(question: str, language: str) -> str:
    """Annotate the final user turn with the target response language."""
    return f"Respond in {language}: {question}"


def conversation_messages(history: list[Turn], question: str, language: str) -> list[dict[str, str]]:
    """Chat-completions style message list with the annotated question last."""
    messages = [{"role": turn.role, "content": turn.text} for turn in history]
    messages.append({"role": "user", "content": language_instruction(question, language)})
    return messages


def flatten_history(history: list[Turn], question: str, language: str) -> str:
    """Single-prompt rendering for vendors without a messages API."""
    lines = [f"{turn.role}: {turn.text}" for turn in history]
    lines.append(f"user: {language_instruction(question, language)}")
    return "\n".join(lines) + "\n"


def build_synthesis_prompt(
    history: list[Turn],
    question: str,
    language: str,
    answers: dict[str, str],
) -> str:
    """Ask one provider to merge every valid answer into a single reply.

    Args:
        history: Prior turns of the session
        question: The new user question
        language: Target response language
        answers: Provider name -> valid answer text, in arrival order

    Returns:
        The synthesis prompt
    """
    parts = ["Conversation history:"]
    if history:
        parts.extend(f"{turn.role}: {turn.text}" for turn in history)
    else:
        parts.append("(none)")

    parts.append("")
    parts.append(f"New question: '{question}'")
    parts.append(
        f"{len(answers)} AI assistants ({', '.join(answers)}) answered it. "
        "Use their answers without quoting them directly:"
    )
    for provider, answer in answers.items():
        parts.append(f"--- {provider} ---")
        parts.append(answer)

    parts.append("")
    parts.append(
        "Write one complete, detailed and helpful answer that integrates their contributions, "
        "resolves any disagreement, keeps a clear and friendly tone and takes the conversation "
        f"history into account. Respond in {language}."
    )
    return "\n".join(parts)
