"""Basic sanity tests for core functionality."""
import pytest
from pydantic import ValidationError


def test_imports():
    """Test that core modules can be imported."""
    from packages.professor_chat import config
    from packages.professor_chat import embeddings
    from packages.professor_chat import llm_client
    from packages.professor_chat import message_store
    from packages.professor_chat import pipeline
    from packages.professor_chat import relay
    from packages.professor_chat import retrieval
    from packages.professor_chat import transport

    assert config is not None
    assert pipeline is not None


def test_config_defaults():
    """Test configuration defaults."""
    from packages.professor_chat.config import Settings

    settings = Settings(_env_file=None, openai_api_key=None)
    assert settings.openai_api_key is None
    assert settings.embedding_model == "text-embedding-3-small"
    assert settings.chat_model == "gpt-4o-mini"
    assert settings.pinecone_index_name == "rag"
    assert settings.pinecone_namespace == "ns1"
    assert settings.retrieval_top_k == 3


def test_config_hides_secrets():
    """Test that API keys are masked in the settings repr."""
    from packages.professor_chat.config import Settings

    settings = Settings(_env_file=None, openai_api_key="sk-very-secret")
    assert "sk-very-secret" not in repr(settings)
    assert settings.openai_api_key.get_secret_value() == "sk-very-secret"


def test_chat_message_roles():
    """Test that only known roles are accepted."""
    from packages.professor_chat.models import ChatMessage, Role

    message = ChatMessage(role="user", content="Hello")
    assert message.role == Role.USER
    assert message.to_dict() == {"role": "user", "content": "Hello"}

    with pytest.raises(ValidationError):
        ChatMessage(role="tool", content="Hello")
    with pytest.raises(ValidationError):
        ChatMessage(role="user")


def test_chat_message_is_frozen():
    """Test that a sent message cannot be edited in place."""
    from packages.professor_chat.models import ChatMessage

    message = ChatMessage(role="user", content="Hello")
    with pytest.raises(ValidationError):
        message.content = "Changed"


def test_retrieval_match_from_mapping():
    """Test building a match from a dict-shaped index result."""
    from packages.professor_chat.models import RetrievalMatch

    match = RetrievalMatch.from_index_match(
        {"id": "Dr. A", "metadata": {"review": "Great", "subject": "Bio", "stars": 4}}
    )
    assert match.id == "Dr. A"
    assert match.review == "Great"
    assert match.subject == "Bio"
    assert match.stars == 4.0


def test_retrieval_match_from_object():
    """Test building a match from an attribute-style index result."""
    from types import SimpleNamespace

    from packages.professor_chat.models import RetrievalMatch

    raw = SimpleNamespace(id="Dr. B", metadata={"review": "Fair", "subject": "Chem", "stars": 3.5})
    match = RetrievalMatch.from_index_match(raw)
    assert match.id == "Dr. B"
    assert match.stars == 3.5


@pytest.mark.parametrize(
    "raw",
    [
        {"id": "Dr. A"},
        {"id": "Dr. A", "metadata": {"review": "Great", "subject": "Bio"}},
        {"id": "Dr. A", "metadata": {"review": "Great", "subject": "Bio", "stars": "lots"}},
        {"metadata": {"review": "Great", "subject": "Bio", "stars": 4}},
    ],
)
def test_retrieval_match_rejects_malformed(raw):
    """Test that incomplete metadata is rejected instead of rendered."""
    from packages.professor_chat.exceptions import MalformedMatchError
    from packages.professor_chat.models import RetrievalMatch

    with pytest.raises(MalformedMatchError):
        RetrievalMatch.from_index_match(raw)


def test_missing_credential_message():
    """Test the missing credential error text."""
    from packages.professor_chat.exceptions import MissingCredentialError, ProfessorChatError

    error = MissingCredentialError("OPENAI_API_KEY")
    assert isinstance(error, ProfessorChatError)
    assert str(error) == "OPENAI_API_KEY is not set"


def test_clients_require_openai_key():
    """Test that SDK clients are not built without a key."""
    from packages.professor_chat.config import Settings
    from packages.professor_chat.embeddings import EmbeddingGenerator
    from packages.professor_chat.exceptions import MissingCredentialError
    from packages.professor_chat.llm_client import ChatCompletionClient

    settings = Settings(_env_file=None, openai_api_key=None)
    with pytest.raises(MissingCredentialError):
        EmbeddingGenerator(settings)
    with pytest.raises(MissingCredentialError):
        ChatCompletionClient(settings)


def test_library_import_ignores_environment(tmp_path):
    """Test that importing the pipeline does not read settings from the environment."""
    import os
    import subprocess
    import sys
    from pathlib import Path

    root = Path(__file__).parent.parent
    env = dict(os.environ, APP_PORT="not-a-port", PYTHONPATH=str(root))
    code = (
        "from packages.professor_chat.config import Settings\n"
        "from packages.professor_chat.pipeline import RagChatPipeline\n"
        "RagChatPipeline(Settings.model_construct(openai_api_key=None))\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code], cwd=tmp_path, env=env, capture_output=True, text=True
    )
    assert result.returncode == 0, result.stderr


def test_setup_logging_uses_given_settings():
    """Test that logging is configured from the injected settings only."""
    import logging

    from packages.professor_chat.config import Settings
    from packages.professor_chat.logging_config import setup_logging

    settings = Settings(_env_file=None, app_log_level="warning")
    logger = setup_logging(settings, name="professor-chat-test")
    setup_logging(settings, name="professor-chat-test")

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    logger.handlers.clear()
