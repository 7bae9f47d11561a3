"""Advisory suggestions for incomplete or implausible family data."""

import itertools
import logging
import re
import unicodedata
from collections.abc import Iterable, Mapping

import networkx as nx

from kintree import graph
from kintree.config import SuggestionSettings, settings as default_settings
from kintree.models import Person, Priority, RelationshipEdge, Suggestion, SuggestionKind
from kintree.store import MAX_PARENTS

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Case-fold, strip accents and collapse whitespace for duplicate matching."""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return re.sub(r"\s+", " ", stripped).strip().casefold()


def _closely_related(G: nx.MultiDiGraph, a: str, b: str) -> bool:
    """Parent and child, or siblings (shared parent or explicit sibling edge)."""
    if a in graph.parents_of(G, b) or b in graph.parents_of(G, a):
        return True
    return b in graph.siblings_of(G, a)


def _could_be_spouses(
    G: nx.MultiDiGraph, a: str, b: str, thresholds: SuggestionSettings
) -> bool:
    pa, pb = graph.person(G, a), graph.person(G, b)
    if pa.gender == pb.gender:
        return False
    if abs(pa.birth_year - pb.birth_year) > thresholds.max_spouse_age_gap:
        return False
    if b in graph.spouses_of(G, a):
        return False
    return not _closely_related(G, a, b)


def _could_be_parent(
    G: nx.MultiDiGraph,
    P: nx.DiGraph,
    parent_id: str,
    child_id: str,
    thresholds: SuggestionSettings,
) -> bool:
    """True when adding ``parent_id -> child_id`` is plausible and the store would accept it."""
    gap = graph.person(G, child_id).birth_year - graph.person(G, parent_id).birth_year
    if not thresholds.min_parent_gap <= gap <= thresholds.max_parent_gap:
        return False
    parents = graph.parents_of(G, child_id)
    if len(parents) >= MAX_PARENTS or parent_id in parents:
        return False
    # the child must not already be an ancestor of the proposed parent
    if nx.has_path(P, child_id, parent_id):
        return False
    return parent_id not in graph.siblings_of(G, child_id)


def compute_suggestions(
    people: Mapping[str, Person],
    edges: Iterable[RelationshipEdge],
    settings: SuggestionSettings | None = None,
) -> list[Suggestion]:
    """
    Scan the family graph for:
    - People with fewer than two recorded parents
    - Impossible or suspicious ages (child born too soon after a parent, parent
      dead long before the birth, very large spouse age gaps)
    - Possible duplicates (same normalized name and birth year)
    - Two parents of one child who are not recorded as spouses
    - Unconnected people who could be linked: opposite-gender pairs close in
      age that are not already close relatives (possible spouses), and older
      people who could fill a child's missing parent slot (possible parents)

    Suggestions are advisory and never applied. Returns them ranked by
    priority, then person id.
    """
    thresholds = settings or default_settings.suggestions
    G = graph.build_graph(people, edges)
    suggestions: list[Suggestion] = []

    # Missing parents
    for pid in G.nodes:
        parents = graph.parents_of(G, pid)
        if len(parents) == 0:
            suggestions.append(
                Suggestion(pid, SuggestionKind.MISSING_PARENT, Priority.HIGH,
                           "suggestion.missingParent.none")
            )
        elif len(parents) == 1:
            suggestions.append(
                Suggestion(pid, SuggestionKind.MISSING_PARENT, Priority.MEDIUM,
                           "suggestion.missingParent.one", tuple(parents))
            )

    # Parent/child ages
    for pid in G.nodes:
        child = graph.person(G, pid)
        for parent_id in graph.parents_of(G, pid):
            parent = graph.person(G, parent_id)
            gap = child.birth_year - parent.birth_year
            if gap <= 0:
                message = "suggestion.ageAnomaly.childBornBeforeParent"
            elif gap < thresholds.min_parent_age:
                message = "suggestion.ageAnomaly.parentTooYoung"
            elif parent.death_year is not None and parent.death_year < child.birth_year - 1:
                # a father can die in the year before the birth
                message = "suggestion.ageAnomaly.parentDiedBeforeBirth"
            else:
                continue
            suggestions.append(
                Suggestion(pid, SuggestionKind.AGE_ANOMALY, Priority.MEDIUM, message, (parent_id,))
            )

    # Spouse age gaps, reported once per pair on the lower id
    for pid in G.nodes:
        person = graph.person(G, pid)
        for spouse_id in graph.spouses_of(G, pid):
            if spouse_id < pid:
                continue
            spouse = graph.person(G, spouse_id)
            if abs(person.birth_year - spouse.birth_year) > thresholds.max_spouse_age_gap:
                suggestions.append(
                    Suggestion(pid, SuggestionKind.AGE_ANOMALY, Priority.MEDIUM,
                               "suggestion.ageAnomaly.spouseAgeGap", (spouse_id,))
                )

    # Possible duplicates
    groups: dict[tuple[str, int], list[str]] = {}
    for pid in G.nodes:
        person = graph.person(G, pid)
        groups.setdefault((normalize_name(person.name), person.birth_year), []).append(pid)
    for ids in groups.values():
        if len(ids) < 2:
            continue
        for pid in ids:
            others = tuple(sorted(i for i in ids if i != pid))
            suggestions.append(
                Suggestion(pid, SuggestionKind.POSSIBLE_DUPLICATE, Priority.LOW,
                           "suggestion.possibleDuplicate.sameNameAndBirthYear", others)
            )

    # Co-parents without a spouse edge
    for family in graph.family_units(G):
        if len(family.parents) != 2:
            continue
        a, b = family.parents
        if b in graph.spouses_of(G, a):
            continue
        for child_id in family.children:
            suggestions.append(
                Suggestion(child_id, SuggestionKind.UNLINKED_CO_PARENTS, Priority.HIGH,
                           "suggestion.unlinkedCoParents.connectParents", (a, b))
            )

    # Connections between people already in the tree
    P = graph.parent_graph(G)
    for a, b in itertools.combinations(sorted(G.nodes), 2):
        if _could_be_spouses(G, a, b, thresholds):
            suggestions.append(
                Suggestion(a, SuggestionKind.POSSIBLE_SPOUSE, Priority.MEDIUM,
                           "suggestion.possibleSpouse.compatibleAge", (b,))
            )
        for parent_id, child_id in ((a, b), (b, a)):
            if _could_be_parent(G, P, parent_id, child_id, thresholds):
                suggestions.append(
                    Suggestion(child_id, SuggestionKind.POSSIBLE_PARENT, Priority.HIGH,
                               "suggestion.possibleParent.compatibleAge", (parent_id,))
                )

    suggestions.sort(key=lambda s: (s.priority.rank, s.person_id, s.kind.value, s.related_ids))
    logger.debug("Computed %d suggestions for %d people", len(suggestions), G.number_of_nodes())
    return suggestions
