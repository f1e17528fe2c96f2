"""FastAPI web application."""
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from packages.professor_chat.config import get_settings
from packages.professor_chat.exceptions import InvalidConversationError, MissingCredentialError
from packages.professor_chat.logging_config import setup_logging
from packages.professor_chat.models import ChatMessage
from packages.professor_chat.pipeline import RagChatPipeline

logger = logging.getLogger("web_api")

TAGS_SYSTEM = "System"
TAGS_CHAT = "Chat"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Configure logging from the process settings at startup."""
    setup_logging(get_settings())
    yield


app = FastAPI(
    lifespan=lifespan,
    title="Professor Chat",
    description="Rate My Professor assistant backed by retrieval-augmented generation",
    version="0.1.0",
    openapi_tags=[
        {
            "name": TAGS_SYSTEM,
            "description": "Health check and the browser chat page.",
        },
        {
            "name": TAGS_CHAT,
            "description": "Retrieval + LLM chat with a streamed plain-text reply.",
        },
    ],
)

STREAM_HEADERS = {"Transfer-Encoding": "chunked"}

_pipeline: Optional[RagChatPipeline] = None


def get_pipeline() -> RagChatPipeline:
    """Get or create the shared chat pipeline."""
    global _pipeline
    if _pipeline is None:
        _pipeline = RagChatPipeline(get_settings())
    return _pipeline


@app.exception_handler(MissingCredentialError)
async def missing_credential_handler(request: Request, exc: MissingCredentialError):
    logger.error(f"Rejecting chat request: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(InvalidConversationError)
async def invalid_conversation_handler(request: Request, exc: InvalidConversationError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.get(
    "/",
    response_class=HTMLResponse,
    tags=[TAGS_SYSTEM],
    summary="Chat page (HTML)",
)
async def root():
    """Return a minimal single-page chat UI.

    The page keeps the transcript in memory, posts all of it on every turn
    and rewrites the last assistant bubble as reply bytes arrive.
    """
    html_content = """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Rate My Professor Chat</title>
        <style>
            body {
                font-family: Arial, sans-serif;
                max-width: 600px;
                margin: 0 auto;
                padding: 20px;
                background-color: #f0f0f0;
            }
            .container {
                background: white;
                padding: 20px;
                border-radius: 8px;
                box-shadow: 0 2px 4px rgba(0,0,0,0.1);
            }
            h1 {
                color: #333;
                border-bottom: 3px solid #1976d2;
                padding-bottom: 10px;
            }
            #chatMessages {
                height: 60vh;
                overflow-y: auto;
                margin-bottom: 10px;
            }
            .message {
                padding: 10px;
                margin: 10px 0;
                border-radius: 4px;
                white-space: pre-wrap;
            }
            .user-message {
                background-color: #e3f2fd;
                text-align: right;
            }
            .assistant-message {
                background-color: #fce4ec;
            }
            input[type="text"] {
                padding: 10px;
                width: 75%;
                box-sizing: border-box;
                border: 1px solid #ddd;
                border-radius: 4px;
            }
            button {
                background-color: #1976d2;
                color: white;
                padding: 10px 20px;
                border: none;
                border-radius: 4px;
                cursor: pointer;
            }
            button:disabled {
                background-color: #ccc;
                cursor: not-allowed;
            }
        </style>
    </head>
    <body>
        <h1>Rate My Professor Chat</h1>
        <div class="container">
            <div id="chatMessages"></div>
            <input type="text" id="queryInput" placeholder="Ask about a professor..." onkeypress="if(event.key==='Enter') sendMessage()">
            <button id="sendButton" onclick="sendMessage()">Send</button>
        </div>

        <script>
            let messages = [
                {role: 'assistant', content: 'Hi! I am the rate my professor bot. How can I help you today?'}
            ];

            function render() {
                const chatMessages = document.getElementById('chatMessages');
                chatMessages.innerHTML = '';
                for (const message of messages) {
                    const div = document.createElement('div');
                    div.className = `message ${message.role}-message`;
                    div.textContent = message.content;
                    chatMessages.appendChild(div);
                }
                chatMessages.scrollTop = chatMessages.scrollHeight;
            }

            async function sendMessage() {
                const queryInput = document.getElementById('queryInput');
                const sendButton = document.getElementById('sendButton');
                const text = queryInput.value;
                if (!text.trim()) return;

                messages = [...messages, {role: 'user', content: text}];
                queryInput.value = '';
                sendButton.disabled = true;
                render();

                try {
                    const response = await fetch('/api/chat', {
                        method: 'POST',
                        headers: {'Content-Type': 'application/json'},
                        body: JSON.stringify(messages),
                    });
                    if (!response.ok) throw new Error('Network response was not ok');

                    const reader = response.body.getReader();
                    const decoder = new TextDecoder();
                    let reply = '';
                    messages = [...messages, {role: 'assistant', content: ''}];

                    while (true) {
                        const {done, value} = await reader.read();
                        if (done) break;
                        reply += decoder.decode(value, {stream: true});
                        messages = [...messages.slice(0, -1), {role: 'assistant', content: reply}];
                        render();
                    }
                } catch (error) {
                    console.error('Error:', error);
                    messages = [...messages, {role: 'assistant', content: 'Sorry, there was an error processing your request.'}];
                    render();
                } finally {
                    sendButton.disabled = false;
                }
            }

            render();
        </script>
    </body>
    </html>
    """
    return HTMLResponse(content=html_content)


@app.get(
    "/health",
    tags=[TAGS_SYSTEM],
    summary="Health check",
    description="Liveness probe. Returns 200 while the process is up.",
)
async def health():
    """Return `{"status": "ok"}`."""
    return {"status": "ok"}


@app.post(
    "/api/chat",
    tags=[TAGS_CHAT],
    summary="Streamed chat reply",
    description=(
        "Takes the whole transcript as a JSON array of `{role, content}` objects. "
        "The newest user message is embedded, the three closest professor reviews are "
        "appended to it, and the model's answer is streamed back as raw UTF-8 text."
    ),
    responses={
        200: {"description": "Chunked plain-text reply.", "content": {"text/plain": {}}},
        400: {"description": "Transcript is empty or does not end with a user message."},
        500: {"description": "OPENAI_API_KEY is not configured."},
    },
)
async def chat(
    messages: List[ChatMessage],
    pipeline: RagChatPipeline = Depends(get_pipeline),
):
    """Stream the assistant's reply to the latest user message.

    Errors from the embedding, index or completion services raised before the
    stream opens are not caught here and become a plain 500.
    """
    logger.info(f"Chat request with {len(messages)} messages")
    body = await pipeline.stream_reply(messages)

    # Closes the completion stream even when the body is never iterated
    return StreamingResponse(
        body,
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
        background=BackgroundTask(body.aclose),
    )


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
