from datetime import datetime, timedelta, timezone

from hypothesis import given, strategies as st

from app.models.post import Post
from app.services.listing import FilterState, SortKey, filter_and_sort, home_sections

BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_post(title, tags=(), excerpt="", category="", minutes=0, id=None):
    return Post(
        id=id or title.lower().replace(" ", "-"),
        title=title,
        slug=id or title.lower().replace(" ", "-"),
        excerpt=excerpt,
        category=category,
        tags=list(tags),
        created_at=BASE + timedelta(minutes=minutes),
    )


def test_search_is_case_insensitive():
    posts = [make_post("Banana Bread", tags=["food"]), make_post("Apple Pie", tags=["fruit"])]
    result = filter_and_sort(posts, "apple", "", SortKey.NEWEST)
    assert [p.title for p in result] == ["Apple Pie"]


def test_search_matches_excerpt_and_tags():
    posts = [
        make_post("One", excerpt="All about Python packaging"),
        make_post("Two", tags=["Travel", "Asia"]),
        make_post("Three"),
    ]
    assert [p.title for p in filter_and_sort(posts, "python")] == ["One"]
    assert [p.title for p in filter_and_sort(posts, "asi")] == ["Two"]


def test_empty_category_does_not_filter():
    posts = [make_post("A", category="food"), make_post("B", category="travel")]
    assert len(filter_and_sort(posts, "", "")) == 2
    assert [p.title for p in filter_and_sort(posts, "", "travel")] == ["B"]


def test_category_is_exact_match():
    posts = [make_post("A", category="food"), make_post("B", category="Food")]
    assert [p.title for p in filter_and_sort(posts, "", "food")] == ["A"]


def test_sort_by_creation_time():
    posts = [make_post("Old", minutes=1), make_post("New", minutes=3), make_post("Mid", minutes=2)]
    assert [p.title for p in filter_and_sort(posts, sort_key=SortKey.NEWEST)] == ["New", "Mid", "Old"]
    assert [p.title for p in filter_and_sort(posts, sort_key=SortKey.OLDEST)] == ["Old", "Mid", "New"]


def test_title_sort_keeps_input_order_for_ties():
    posts = [make_post("B", id="b1"), make_post("A", id="a1"), make_post("B", id="b2"), make_post("A", id="a2")]
    assert [p.id for p in filter_and_sort(posts, sort_key="title-asc")] == ["a1", "a2", "b1", "b2"]
    assert [p.id for p in filter_and_sort(posts, sort_key="title-desc")] == ["b1", "b2", "a1", "a2"]


def test_legacy_and_unknown_sort_keys():
    assert SortKey.parse("title") == SortKey.TITLE_ASC
    assert SortKey.parse("bogus") == SortKey.NEWEST
    assert SortKey.parse(None) == SortKey.NEWEST


def test_input_list_is_not_modified():
    posts = [make_post("B"), make_post("A")]
    filter_and_sort(posts, sort_key=SortKey.TITLE_ASC)
    assert [p.title for p in posts] == ["B", "A"]


def test_filter_state_query_params_round_trip():
    state = FilterState.from_query_params({"search": " apple ", "category": "food", "sort": "title"})
    assert state.search_term == "apple"
    assert state.sort_key == SortKey.TITLE_ASC
    assert state.to_query_params() == {"search": "apple", "category": "food", "sort": "title-asc"}
    assert FilterState().to_query_params() == {}
    assert state.is_filtered and not FilterState().is_filtered


def test_home_sections():
    posts = [make_post(f"Post {i}") for i in range(12)]
    featured, recent = home_sections(posts)
    assert [p.title for p in featured] == ["Post 0", "Post 1", "Post 2"]
    assert [p.title for p in recent] == [f"Post {i}" for i in range(3, 9)]


# ---------- properties ----------

words = st.sampled_from(["apple", "Banana", "cherry", "date", "Elder", "fig", ""])

post_strategy = st.builds(
    lambda title, excerpt, tags, category, minutes: make_post(
        title, tags=tags, excerpt=excerpt, category=category, minutes=minutes, id=None
    ),
    title=st.text(alphabet="abcAB ", min_size=1, max_size=6),
    excerpt=words,
    tags=st.lists(words, max_size=3),
    category=st.sampled_from(["", "food", "travel"]),
    minutes=st.integers(min_value=0, max_value=5),
)
sort_keys = st.sampled_from(list(SortKey))


@given(st.lists(post_strategy, max_size=15), words, st.sampled_from(["", "food", "travel"]), sort_keys)
def test_filter_and_sort_is_idempotent(posts, term, category, key):
    once = filter_and_sort(posts, term, category, key)
    assert filter_and_sort(once, term, category, key) == once
    assert filter_and_sort(posts, term, category, key) == once


@given(st.lists(post_strategy, max_size=15))
def test_title_orders_are_monotonic_and_stable(posts):
    ascending = filter_and_sort(posts, sort_key=SortKey.TITLE_ASC)
    titles = [p.title for p in ascending]
    assert titles == sorted(titles)

    descending = filter_and_sort(posts, sort_key=SortKey.TITLE_DESC)
    assert [p.title for p in descending] == sorted(titles, reverse=True)

    # Equal titles keep their original relative order
    for result in (ascending, descending):
        for title in set(titles):
            original = [id(p) for p in posts if p.title == title]
            assert [id(p) for p in result if p.title == title] == original


@given(st.lists(post_strategy, max_size=15), words)
def test_every_result_matches_the_search(posts, term):
    for post in filter_and_sort(posts, term):
        needle = term.lower()
        assert (needle in post.title.lower() or needle in post.excerpt.lower()
                or any(needle in tag.lower() for tag in post.tags))
