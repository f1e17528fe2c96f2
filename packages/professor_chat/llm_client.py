"""Chat completion client and prompt assembly."""
import logging
from typing import Any, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from packages.professor_chat.config import Settings, get_settings
from packages.professor_chat.exceptions import MissingCredentialError
from packages.professor_chat.models import ChatMessage, Role

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """
# Rate My Professor Agent System Prompt

You are an AI assistant that helps students find professors using a Rate My Professor database.
Understand the student's query, use the professor reviews retrieved for it, and give helpful recommendations.

## Core Responsibilities:
1. Interpret student queries about professors, courses, or academic needs.
2. Use the retrieved professor reviews appended to the student's message.
3. Present the top three professor recommendations for each query, with supporting information.
4. Keep responses clear, concise, and helpful.

## Response Format:
1. Brief acknowledgment of the student's query.
2. Top 3 professor recommendations, each including:
   - Professor's name
   - Subject/Department
   - Star rating (out of 5)
   - Brief summary of strengths or relevant information
3. A short explanation of why these professors were recommended.
4. (Optional) Additional advice related to the student's query.

## Guidelines:
- Keep a friendly, supportive tone.
- If a query is too vague, ask for clarification.
- Do not share personal contact information of professors.
- For topics outside professor recommendations (admissions, campus life), give general advice and suggest contacting the relevant university department.
- Base recommendations on the retrieved data, not personal opinions.
- If there is not enough data to recommend anyone, say so and suggest other resources.

Format recommendations as a bullet list; each bullet starts with a dash (-) and a space.
"""


class ChatCompletionClient:
    """Client for streamed chat completions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
    ):
        """
        Initialize chat completion client.

        Args:
            settings: Settings holding the OpenAI key and default model
            client: Pre-built OpenAI client (tests inject fakes here)
            model: Model name
        """
        settings = settings or get_settings()
        self.model = model or settings.chat_model

        if client is None:
            if settings.openai_api_key is None:
                raise MissingCredentialError("OPENAI_API_KEY")
            client = AsyncOpenAI(api_key=settings.openai_api_key.get_secret_value())
        self.client = client
        logger.info(f"Chat completion client initialized, model: {self.model}")

    async def chat_stream(self, messages: List[Dict[str, str]]) -> Any:
        """
        Start a streamed chat completion.

        Args:
            messages: List of message dicts with 'role' and 'content'

        Returns:
            The SDK's async chunk stream; iterate it and close it when done
        """
        try:
            return await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                stream=True,
            )

        except Exception as e:
            logger.error(f"Error starting chat completion stream: {e}")
            raise


def build_chat_messages(history: Sequence[ChatMessage], augmented_prompt: str) -> List[Dict[str, str]]:
    """
    Build the message list sent to the model.

    Args:
        history: Full transcript; its last message is replaced
        augmented_prompt: Last user message with retrieved reviews appended

    Returns:
        System prompt, prior turns, then the augmented user turn
    """
    return [
        {"role": Role.SYSTEM.value, "content": SYSTEM_PROMPT},
        *(message.to_dict() for message in history[:-1]),
        {"role": Role.USER.value, "content": augmented_prompt},
    ]
