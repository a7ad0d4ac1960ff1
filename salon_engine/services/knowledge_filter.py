"""Keyword relevance filter for character knowledge.

This is plain substring matching, not semantic retrieval: the query is
lower-cased and split on whitespace, and an entry is kept when any token
occurs anywhere in its lower-cased title or content. Partial words count
("rel" matches "Relativity"). Entries keep their storage order and are never
scored or ranked.
"""

from typing import Iterable, List

from salon_engine.models.character import KnowledgeEntry


def tokenize_query(query_text: str) -> List[str]:
    """Lower-case the query and split it on whitespace."""
    if not query_text:
        return []
    return query_text.lower().split()


def filter_relevant_knowledge(query_text: str, entries: Iterable[KnowledgeEntry]) -> List[KnowledgeEntry]:
    """
    Select the entries that share at least one token with the query.

    Args:
        query_text: Free text (a user message, or several joined together)
        entries: Knowledge entries in storage order

    Returns:
        Matching entries in storage order, each at most once.
        Empty when there are no entries or the query has no tokens.
    """
    tokens = tokenize_query(query_text)
    if not tokens:
        return []

    matched = []
    for entry in entries:
        title = (entry.title or "").lower()
        content = (entry.content or "").lower()
        if any(token in title or token in content for token in tokens):
            matched.append(entry)
    return matched
