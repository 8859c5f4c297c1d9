"""Tests for ReactionSynchronizer add/remove/replace against a reaction source."""

from unittest.mock import AsyncMock

import pytest

from chatroom_toolkit.data_models.reaction import ReactionSource
from chatroom_toolkit.errors import RemoteFailureError, RequestCancelledError
from chatroom_toolkit.reactions.synchronizer import ReactionSynchronizer
from chatroom_toolkit.sources.in_memory import InMemoryReactionSource

from conftest import make_reaction


@pytest.fixture
def source() -> InMemoryReactionSource:
    return InMemoryReactionSource()


@pytest.fixture
def synchronizer(source: InMemoryReactionSource) -> ReactionSynchronizer:
    return ReactionSynchronizer(source)


class TestAddRemove:
    @pytest.mark.asyncio
    async def test_add_returns_server_reaction(self, synchronizer, source):
        reaction = await synchronizer.add("m1", "u1", "👍")

        assert reaction.message_id == "m1"
        assert reaction.user_id == "u1"
        assert reaction.emoji == "👍"
        assert reaction.id
        assert source.reactions["m1"] == [reaction]

    @pytest.mark.asyncio
    async def test_remove_absent_reaction_is_not_an_error(self, synchronizer, source):
        await synchronizer.remove("m1", "u1", "👍")
        await synchronizer.remove("m1", "u1", "👍")

        assert [call[0] for call in source.calls] == ["remove_reaction", "remove_reaction"]

    @pytest.mark.asyncio
    async def test_remote_errors_are_wrapped(self, synchronizer, source):
        source.fail_with = ConnectionError("boom")

        with pytest.raises(RemoteFailureError) as exc_info:
            await synchronizer.add("m1", "u1", "👍")

        assert "boom" in exc_info.value.detail
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_transport_cancellation_is_not_wrapped(self, synchronizer, source):
        source.fail_with = RequestCancelledError("cancelled")

        with pytest.raises(RequestCancelledError):
            await synchronizer.remove("m1", "u1", "👍")


class TestReplace:
    @pytest.mark.asyncio
    async def test_without_old_emoji_only_adds(self, synchronizer, source):
        reaction = await synchronizer.replace("m1", "u1", None, "👍")

        assert reaction.emoji == "👍"
        assert [call[0] for call in source.calls] == ["add_reaction"]

    @pytest.mark.asyncio
    async def test_removes_old_then_adds_new(self, synchronizer, source):
        await synchronizer.add("m1", "u1", "👍")

        reaction = await synchronizer.replace("m1", "u1", "👍", "❤️")

        assert reaction.emoji == "❤️"
        assert [call[0] for call in source.calls] == ["add_reaction", "remove_reaction", "add_reaction"]
        assert [r.emoji for r in source.reactions["m1"]] == ["❤️"]

    @pytest.mark.asyncio
    async def test_failed_add_after_remove_leaves_no_reaction(self):
        """No rollback: the removed reaction stays removed and the error propagates."""
        source = AsyncMock(spec=ReactionSource)
        source.add_reaction.side_effect = TimeoutError("add timed out")
        synchronizer = ReactionSynchronizer(source)

        with pytest.raises(RemoteFailureError):
            await synchronizer.replace("m1", "u1", "👍", "❤️")

        source.remove_reaction.assert_awaited_once_with(message_id="m1", user_id="u1", emoji="👍")
        source.add_reaction.assert_awaited_once_with(message_id="m1", user_id="u1", emoji="❤️")

    @pytest.mark.asyncio
    async def test_failed_remove_skips_add(self):
        source = AsyncMock(spec=ReactionSource)
        source.remove_reaction.side_effect = ConnectionError("down")
        synchronizer = ReactionSynchronizer(source)

        with pytest.raises(RemoteFailureError):
            await synchronizer.replace("m1", "u1", "👍", "❤️")

        source.add_reaction.assert_not_awaited()


class TestSummaries:
    def test_delegates_to_aggregator(self, synchronizer):
        reactions = [make_reaction("m1", "u1", "👍"), make_reaction("m1", "u2", "👍"), make_reaction("m1", "u3", "❤️")]

        summaries = synchronizer.summaries(reactions, current_user_id="u3")

        assert [(s.emoji, s.count) for s in summaries] == [("👍", 2), ("❤️", 1)]
        assert summaries[1].includes_current_user
