import logging

import httpx

from models.destination import Destination
from utils.errors import LLMError
from utils.llm_client import LLMClient

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000
# Messages kept before the current one (last five exchanges, minus the question)
MAX_HISTORY = 9

GENERAL_TRAVEL_PROMPT = """You are WanderAI, an intelligent and friendly travel guide assistant for WanderHub. You help travelers discover destinations, plan trips, and get practical travel advice.

YOUR ROLE:
- Provide practical travel tips and recommendations
- Help users plan trips around their interests, budget, and preferences
- Suggest destinations, activities, and authentic experiences
- Answer questions about locations, timing, packing and logistics

GUIDELINES:
- Focus exclusively on travel, destinations, and tourism topics
- When you don't have specific information, say so honestly
- Keep responses concise (2-3 paragraphs) unless the user asks for more detail
- If asked about non-travel topics, politely redirect to travel planning"""


class ChatValidationError(ValueError):
    pass


def build_destination_prompt(destination: Destination) -> str:
    lines = [
        f"- Name: {destination.name}",
        f"- Category: {destination.category}",
    ]
    if destination.description:
        lines.append(f"- Description: {destination.description}")
    if destination.address:
        lines.append(f"- Address: {destination.address}")
    if destination.rating:
        lines.append(f"- Rating: {destination.rating}/5")
    if destination.price_level:
        lines.append(f"- Price Level: {'$' * destination.price_level}/4")
    if destination.amenities:
        lines.append(f"- Amenities: {', '.join(destination.amenities)}")
    if destination.website:
        lines.append(f"- Website: {destination.website}")
    if destination.opening_hours:
        lines.append("- Opening Hours:")
        lines.extend(f"  - {h}" for h in destination.opening_hours)

    context = "\n".join(lines)
    return f"""You are WanderAI, an intelligent travel assistant for WanderHub. You are currently helping a user explore "{destination.name}".

Use the destination context below when answering. Do not answer from general knowledge alone.

DESTINATION CONTEXT:
{context}

RULES:
- Answer questions specifically about {destination.name} using the context above
- If the context lacks the requested information, say so and share what you do know
- Never make up facts about {destination.name}
- If the user asks about a different location, offer to focus back on {destination.name}
- Keep responses concise (2-3 paragraphs max unless more detail is requested)"""


def prepare_messages(messages: list[dict]) -> list[dict]:
    """Validate chat turns and return the window sent to the model.

    Blank turns are dropped; the last remaining turn must be the user's
    question and no longer than MAX_MESSAGE_LENGTH characters.
    """
    valid = [m for m in messages if (m.get("content") or "").strip()]
    if not valid:
        raise ChatValidationError("No valid messages provided")

    current = valid[-1]
    if current.get("role") != "user":
        raise ChatValidationError("Last message must be from user")
    if len(current["content"]) > MAX_MESSAGE_LENGTH:
        raise ChatValidationError(
            f"Message too long. Please keep your questions under {MAX_MESSAGE_LENGTH} characters."
        )

    history = valid[:-1][-MAX_HISTORY:]
    return [
        {"role": "assistant" if m.get("role") == "assistant" else "user", "content": m["content"]}
        for m in history + [current]
    ]


def describe_llm_error(error: Exception) -> str:
    """User-facing message for a failed AI call."""
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status in (401, 403):
            return "Authentication error. Please check your API configuration."
        if status == 404:
            return "AI model configuration error. Please contact support."
        if status == 429:
            return "Service temporarily busy. Please wait a moment and try again."
        return f"Unable to process your request: AI provider returned HTTP {status}."
    if isinstance(error, httpx.TransportError):
        return "Network error. Please check your connection and try again."
    if isinstance(error, LLMError):
        return str(error)
    return f"Unable to process your request: {str(error)[:100]}"


async def _generate(llm: LLMClient, system: str, messages: list[dict],
                    temperature: float, max_tokens: int) -> str:
    window = prepare_messages(messages)
    try:
        reply = await llm.chat_completion_with_history(
            messages=[{"role": "system", "content": system}] + window,
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except Exception as e:
        logger.exception("Chat generation failed")
        raise LLMError(describe_llm_error(e)) from e

    if not reply.strip():
        raise LLMError("Received empty response from AI. Please try rephrasing your question.")
    return reply.strip()


async def destination_chat(llm: LLMClient, destination: Destination, messages: list[dict]) -> str:
    return await _generate(llm, build_destination_prompt(destination), messages,
                           temperature=0.7, max_tokens=500)


async def general_travel_chat(llm: LLMClient, messages: list[dict]) -> str:
    return await _generate(llm, GENERAL_TRAVEL_PROMPT, messages,
                           temperature=0.8, max_tokens=600)
