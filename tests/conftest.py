"""Shared fixtures."""
import pytest

from packages.professor_chat.config import Settings
from tests.fakes import SAMPLE_MATCHES, FakeIndex, FakeOpenAI


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, openai_api_key="sk-test", pinecone_api_key="pc-test")


@pytest.fixture
def fake_openai() -> FakeOpenAI:
    return FakeOpenAI(reply=[None, "Hi", "", " there", None])


@pytest.fixture
def fake_index() -> FakeIndex:
    return FakeIndex(SAMPLE_MATCHES)


@pytest.fixture
def make_pipeline(fake_openai, fake_index):
    """Factory building a pipeline wired to the fakes."""
    from packages.professor_chat.embeddings import EmbeddingGenerator
    from packages.professor_chat.llm_client import ChatCompletionClient
    from packages.professor_chat.pipeline import RagChatPipeline
    from packages.professor_chat.retrieval import ProfessorIndex

    def _make(settings: Settings):
        return RagChatPipeline(
            settings,
            embedder=EmbeddingGenerator(settings, client=fake_openai),
            index=ProfessorIndex(settings, index=fake_index),
            llm=ChatCompletionClient(settings, client=fake_openai),
        )

    return _make
