"""
Integration tests for the chat workflow.

These walk a conversation through the HTTP surface the way the browser does:
the client keeps the history and resubmits it in full every turn.
"""

import pytest
from fastapi import status
from httpx import AsyncClient

from app.core.security import create_session_token
from app.domains.conversation.service import DEFAULT_SYSTEM_PROMPT


class TestChatWorkflow:
    @pytest.mark.asyncio
    async def test_signed_in_conversation_round_trip(self, authenticated_client: AsyncClient, fake_provider):
        """Test a three-turn conversation is stored once per turn and read back in order."""
        history = [{"role": "system", "content": "You answer questions about the sea."}]
        conversation_id = None

        for question in ("How deep is the ocean?", "What about the Pacific?", "Thanks!"):
            history.append({"role": "user", "content": question})
            body = {"messages": history, "conversationId": conversation_id}

            response = await authenticated_client.post("/chat", json=body)

            assert response.status_code == status.HTTP_200_OK
            data = response.json()
            conversation_id = conversation_id or data["conversationId"]
            assert data["conversationId"] == conversation_id
            history.append(data["reply"])

        assert len(fake_provider.calls) == 3
        assert fake_provider.calls[-1]["messages"] == history[:-1]

        listing = await authenticated_client.get("/conversations")
        conversations = listing.json()["conversations"]
        assert [c["id"] for c in conversations] == [conversation_id]
        assert conversations[0]["title"] == "How deep is the ocean?..."

        detail = await authenticated_client.get(f"/conversations/{conversation_id}")
        stored = [(m["role"], m["content"]) for m in detail.json()["messages"]]
        assert stored == [(m["role"], m["content"]) for m in history]
        assert DEFAULT_SYSTEM_PROMPT not in [content for _, content in stored]

    @pytest.mark.asyncio
    async def test_anonymous_then_signed_in(self, client: AsyncClient, test_settings, test_user):
        """Test anonymous turns leave nothing behind for the user to find later."""
        anonymous = await client.post("/chat", json={"messages": [{"role": "user", "content": "Hi"}]})
        assert anonymous.json()["conversationId"] is None

        headers = {"Authorization": f"Bearer {create_session_token(test_settings, test_user.id)}"}
        listing = await client.get("/conversations", headers=headers)

        assert listing.status_code == status.HTTP_200_OK
        assert listing.json()["conversations"] == []

    @pytest.mark.asyncio
    async def test_conversations_are_private(
        self, authenticated_client: AsyncClient, client: AsyncClient, test_settings, test_user_2
    ):
        """Test a second user can neither read nor continue someone else's conversation."""
        created = await authenticated_client.post(
            "/chat", json={"messages": [{"role": "user", "content": "My secret reef"}]}
        )
        conversation_id = created.json()["conversationId"]

        headers = {"Authorization": f"Bearer {create_session_token(test_settings, test_user_2.id)}"}
        read = await client.get(f"/conversations/{conversation_id}", headers=headers)
        write = await client.post(
            "/chat",
            json={"messages": [{"role": "user", "content": "Hijack"}], "conversationId": conversation_id},
            headers=headers,
        )
        listing = await client.get("/conversations", headers=headers)

        assert read.status_code == status.HTTP_403_FORBIDDEN
        assert write.status_code == status.HTTP_403_FORBIDDEN
        assert listing.json()["conversations"] == []

        owner_view = await authenticated_client.get(f"/conversations/{conversation_id}")
        assert "Hijack" not in owner_view.text
