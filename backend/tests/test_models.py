"""Tests for data models."""

import pytest
from pydantic import ValidationError

from newschat.models import (
    ChatRequest,
    ChatRole,
    ContextChunk,
    ConversationTurn,
    NewsArticle,
    SessionHistoryResponse,
    SessionLookup,
    SessionStatus,
)
from newschat.models.chat import ConversationTurnResponse


class TestConversationTurn:
    def test_dict_round_trip(self):
        turn = ConversationTurn(ChatRole.ASSISTANT, "Hello")

        assert turn.to_dict() == {"role": "assistant", "text": "Hello"}
        assert ConversationTurn.from_dict(turn.to_dict()) == turn

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            ConversationTurn.from_dict({"role": "system", "text": "x"})

    def test_immutable(self):
        turn = ConversationTurn(ChatRole.USER, "Hi")
        with pytest.raises(AttributeError):
            turn.text = "changed"


class TestSessionLookup:
    def test_constructors(self):
        turns = [ConversationTurn(ChatRole.USER, "Hi")]

        assert SessionLookup.found(turns).status == SessionStatus.FOUND
        assert SessionLookup.found(turns).turns == turns
        assert SessionLookup.not_found().turns == []
        assert SessionLookup.unavailable().status == SessionStatus.UNAVAILABLE


class TestChatRequest:
    def test_accepts_camel_case_session_id(self):
        request = ChatRequest.model_validate({"message": "Hi", "sessionId": "s1"})

        assert request.session_id == "s1"

    def test_missing_fields_are_none(self):
        request = ChatRequest.model_validate({})

        assert request.message is None
        assert request.session_id is None

    def test_wrong_type_rejected(self):
        with pytest.raises(ValidationError):
            ChatRequest.model_validate({"message": ["not", "text"], "sessionId": "s1"})


class TestSessionHistoryResponse:
    def test_serializes_with_alias(self):
        response = SessionHistoryResponse(
            session_id="s1",
            turns=[ConversationTurnResponse.from_dataclass(ConversationTurn(ChatRole.USER, "Hi"))],
        )

        assert response.model_dump(by_alias=True, mode="json") == {
            "sessionId": "s1",
            "turns": [{"role": "user", "text": "Hi"}],
        }


class TestNewsModels:
    def test_article_from_api_handles_nulls(self):
        item = NewsArticle.from_api(
            {"title": "T", "description": None, "url": "https://a"},
            category="general",
        )

        assert item.description == ""
        assert not item.is_usable

    def test_embedding_text(self):
        item = NewsArticle(title="Title", description="Summary.", url="https://a")

        assert item.embedding_text == "Title. Summary."

    def test_chunk_from_payload(self):
        chunk = ContextChunk.from_payload({"text": "t", "source_url": "https://a", "category": "x"}, 0.5)

        assert chunk == ContextChunk(text="t", source_url="https://a", score=0.5)
