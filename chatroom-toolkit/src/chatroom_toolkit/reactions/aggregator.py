"""
Grouping of raw reactions into display summaries.

Pure computation, no state and no I/O. Summaries are sorted by count,
highest first. Emoji with equal counts keep the order in which they first
appear in the input list, which makes the output deterministic for a given
reaction list.
"""

from typing import Sequence

from chatroom_toolkit.data_models.reaction import Reaction, ReactionSummary


class ReactionAggregator:
    @staticmethod
    def summaries(reactions: Sequence[Reaction], current_user_id: str) -> list[ReactionSummary]:
        groups: dict[str, list[str]] = {}
        for reaction in reactions:
            groups.setdefault(reaction.emoji, []).append(reaction.user_id)

        summaries = [
            ReactionSummary(
                emoji=emoji,
                count=len(user_ids),
                user_ids=list(dict.fromkeys(user_ids)),
                includes_current_user=current_user_id in user_ids,
            )
            for emoji, user_ids in groups.items()
        ]
        # sorted() is stable, so ties stay in first-occurrence order
        return sorted(summaries, key=lambda summary: summary.count, reverse=True)

    @staticmethod
    def has_user(summary: ReactionSummary, user_id: str) -> bool:
        return summary.has_user(user_id)

    @staticmethod
    def own_reaction(reactions: Sequence[Reaction], user_id: str) -> Reaction | None:
        """Return the user's reaction on a message, if any."""
        return next((reaction for reaction in reactions if reaction.user_id == user_id), None)
