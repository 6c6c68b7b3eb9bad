"""Market filtering and ordering.

Search matches case-insensitively against company, bond id and question
(any one is enough). Category is an exact case-insensitive match, with
"all" passing everything.

Sorting is stable and runs on raw integer magnitudes, never on formatted
display strings:
  volume, participants, raised -> descending
  deadline                     -> ascending (soonest first)
"""

from collections.abc import Callable, Sequence

from bondmarket.models import FilterSpec, MarketView, SortKey

_SORT_KEYS: dict[SortKey, tuple[Callable[[MarketView], int], bool]] = {
    SortKey.VOLUME: (lambda v: v.volume_raw, True),
    SortKey.PARTICIPANTS: (lambda v: v.participants, True),
    SortKey.DEADLINE: (lambda v: v.deadline_ts, False),
    SortKey.RAISED: (lambda v: v.raised_raw, True),
}


def matches_search(view: MarketView, search_term: str) -> bool:
    """Return True if the term is a substring of company, bond id or question."""
    term = search_term.lower()
    if not term:
        return True
    return (
        term in view.company.lower()
        or term in view.bond_id.lower()
        or term in view.question.lower()
    )


def matches_category(view: MarketView, category: str) -> bool:
    """Return True if the view is in the category, or the category is "all"."""
    wanted = category.lower()
    return wanted == "all" or view.category.lower() == wanted


def filter_and_sort(views: Sequence[MarketView], query: FilterSpec) -> list[MarketView]:
    """Filter views by search term and category, then order by the sort key.

    Args:
        views: Market views in fetch order.
        query: Search, category and sort selection.

    Returns:
        New list; ties keep their relative input order.
    """
    selected = [
        view
        for view in views
        if matches_search(view, query.search_term)
        and matches_category(view, query.category)
    ]

    key, descending = _SORT_KEYS[SortKey(query.sort_key)]
    # sorted() stays stable with reverse=True
    return sorted(selected, key=key, reverse=descending)
