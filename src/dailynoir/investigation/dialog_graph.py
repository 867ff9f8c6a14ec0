"""Dialogue graph for suspect and witness interrogation."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable

import networkx as nx

from dailynoir.domain.errors import ContentValidationFailed, OptionNotFound
from dailynoir.domain.models import DialogueOption, Speaker


@dataclass(frozen=True)
class DialogueResult:
    option_id: str
    response: str
    is_suspicious: bool
    unlocked_clue_id: str | None = None
    next_option_ids: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_exhausted(self) -> bool:
        return not self.next_option_ids


class DialogGraph:
    """Directed graph of one speaker's dialogue options.

    Nodes are option ids carrying the full ``DialogueOption``; an edge runs
    from an option to each of its follow-ups. Root options are the ones the
    content marks with ``is_root_option``.
    """

    def __init__(self, speaker_id: str, options: Iterable[DialogueOption]):
        self.speaker_id = speaker_id
        self.graph = nx.DiGraph()
        for option in options:
            if self.graph.has_node(option.id):
                raise ContentValidationFailed(
                    f"speaker {speaker_id}", [f"duplicate dialogue option {option.id}"]
                )
            self.graph.add_node(option.id, option=option)
        for option_id, option in self.options_by_id().items():
            for next_id in option.next_options:
                if not self.graph.has_node(next_id):
                    raise ContentValidationFailed(
                        f"speaker {speaker_id}",
                        [f"option {option_id} points at missing option {next_id}"],
                    )
                self.graph.add_edge(option_id, next_id)

    @classmethod
    def for_speaker(cls, speaker: Speaker) -> "DialogGraph":
        return cls(speaker.id, speaker.dialogue_options)

    def options_by_id(self) -> dict[str, DialogueOption]:
        return {node: data["option"] for node, data in self.graph.nodes(data=True)}

    def has_option(self, option_id: str) -> bool:
        return self.graph.has_node(option_id)

    def option(self, option_id: str) -> DialogueOption:
        if not self.graph.has_node(option_id):
            raise OptionNotFound(option_id, detail=self.speaker_id)
        return self.graph.nodes[option_id]["option"]

    def root_ids(self) -> list[str]:
        return [
            node
            for node, data in self.graph.nodes(data=True)
            if data["option"].is_root_option
        ]

    def reachable_ids(self) -> set[str]:
        reachable: set[str] = set()
        for root in self.root_ids():
            reachable.add(root)
            reachable.update(nx.descendants(self.graph, root))
        return reachable

    def unreachable_ids(self) -> list[str]:
        reachable = self.reachable_ids()
        return [node for node in self.graph.nodes if node not in reachable]

    def has_cycle(self) -> bool:
        return not nx.is_directed_acyclic_graph(self.graph)


@lru_cache(maxsize=256)
def graph_for(speaker: Speaker) -> DialogGraph:
    """One graph per distinct speaker; equal frozen speakers share it."""
    return DialogGraph.for_speaker(speaker)


def select_option(speaker: Speaker, option_id: str) -> DialogueResult:
    """Resolve a chosen question into the speaker's answer and follow-ups.

    An empty ``next_option_ids`` means this branch is exhausted; callers
    fall back to ``root_options`` for the speaker.
    """
    option = graph_for(speaker).option(option_id)
    return DialogueResult(
        option_id=option.id,
        response=option.response,
        is_suspicious=option.is_suspicious,
        unlocked_clue_id=option.unlocks_clue,
        next_option_ids=tuple(option.next_options),
    )


def root_options(speaker: Speaker) -> list[DialogueOption]:
    return [opt for opt in speaker.dialogue_options if opt.is_root_option]


def options_for(speaker: Speaker, option_ids: Iterable[str]) -> list[DialogueOption]:
    graph = graph_for(speaker)
    return [graph.option(option_id) for option_id in option_ids]


def reachable_option_ids(speaker: Speaker) -> set[str]:
    return graph_for(speaker).reachable_ids()


def unreachable_option_ids(speaker: Speaker) -> list[str]:
    """Options no root question can lead to; an authoring report, not an error."""
    return graph_for(speaker).unreachable_ids()
