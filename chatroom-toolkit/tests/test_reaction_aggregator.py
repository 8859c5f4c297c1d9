"""Tests for ReactionAggregator grouping and ordering."""

from chatroom_toolkit.data_models.reaction import ReactionSummary
from chatroom_toolkit.reactions.aggregator import ReactionAggregator

from conftest import make_reaction


class TestSummaries:
    def test_groups_by_emoji_sorted_by_count(self):
        """Two thumbs-up and one heart give the thumbs-up group first."""
        reactions = [
            make_reaction("m1", "u1", "👍"),
            make_reaction("m1", "u2", "👍"),
            make_reaction("m1", "u3", "❤️"),
        ]

        summaries = ReactionAggregator.summaries(reactions, current_user_id="u1")

        assert [(s.emoji, s.count, s.user_ids) for s in summaries] == [
            ("👍", 2, ["u1", "u2"]),
            ("❤️", 1, ["u3"]),
        ]

    def test_less_frequent_emoji_seen_first_still_sorts_last(self):
        reactions = [
            make_reaction("m1", "u3", "❤️"),
            make_reaction("m1", "u1", "👍"),
            make_reaction("m1", "u2", "👍"),
        ]

        summaries = ReactionAggregator.summaries(reactions, current_user_id="u1")

        assert [s.emoji for s in summaries] == ["👍", "❤️"]

    def test_ties_keep_first_occurrence_order(self):
        reactions = [
            make_reaction("m1", "u1", "🎉"),
            make_reaction("m1", "u2", "👍"),
            make_reaction("m1", "u3", "❤️"),
        ]

        summaries = ReactionAggregator.summaries(reactions, current_user_id="u9")

        assert [s.emoji for s in summaries] == ["🎉", "👍", "❤️"]

    def test_empty_input(self):
        assert ReactionAggregator.summaries([], current_user_id="u1") == []

    def test_marks_current_user(self):
        reactions = [make_reaction("m1", "u1", "👍"), make_reaction("m1", "u2", "❤️")]

        summaries = {s.emoji: s for s in ReactionAggregator.summaries(reactions, current_user_id="u1")}

        assert summaries["👍"].includes_current_user is True
        assert summaries["❤️"].includes_current_user is False

    def test_user_ids_are_deduplicated_but_count_is_raw(self):
        """The count reflects the raw list; the user set does not repeat users."""
        reactions = [
            make_reaction("m1", "u1", "👍", reaction_id="r1"),
            make_reaction("m1", "u1", "👍", reaction_id="r2"),
        ]

        (summary,) = ReactionAggregator.summaries(reactions, current_user_id="u1")

        assert summary.count == 2
        assert summary.user_ids == ["u1"]


class TestHasUser:
    def test_has_user(self):
        summary = ReactionSummary(emoji="👍", count=2, user_ids=["u1", "u2"])

        assert ReactionAggregator.has_user(summary, "u2")
        assert not ReactionAggregator.has_user(summary, "u3")
        assert summary.has_user("u1")


class TestOwnReaction:
    def test_finds_users_reaction(self):
        reactions = [make_reaction("m1", "u2", "❤️"), make_reaction("m1", "u1", "👍")]

        own = ReactionAggregator.own_reaction(reactions, "u1")

        assert own is not None
        assert own.emoji == "👍"

    def test_none_when_user_has_not_reacted(self):
        assert ReactionAggregator.own_reaction([make_reaction("m1", "u2", "❤️")], "u1") is None
