from app.schemas.search import DEFAULT_SORT, SearchQuery


def test_normalization_trims_lowercases_and_defaults_sort():
    query = SearchQuery.normalized(text="  Futbol 5 ", category=" football ", sort="")

    assert query.text == "futbol 5"
    assert query.category == "football"
    assert query.sort == DEFAULT_SORT


def test_equivalent_queries_share_a_cache_key():
    a = SearchQuery.normalized(text="Yoga", page=1, size=10)
    b = SearchQuery.normalized(text=" yoga  ", page=1, size=10)

    assert a.cache_key() == b.cache_key()
    assert a.cache_key().startswith("q:")


def test_pagination_changes_the_cache_key():
    a = SearchQuery.normalized(text="yoga", page=1)
    b = SearchQuery.normalized(text="yoga", page=2)

    assert a.cache_key() != b.cache_key()


def test_start_offset():
    assert SearchQuery.normalized(page=3, size=20).start == 40
    assert SearchQuery.normalized(page=1, size=20).start == 0
