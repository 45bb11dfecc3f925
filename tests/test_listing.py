from django.test import RequestFactory

from store.listing import ListQuery


def test_apply_filters_resets_page_and_drops_blanks():
    query = ListQuery(page=4).apply_filters(search="mug", status="")
    assert query.page == 1
    assert query.filters == {"search": "mug"}


def test_page_and_sort_keep_filters():
    query = ListQuery(filters={"role": "ADMIN"}).with_page(3).with_sort("createdAt", "asc")
    assert query.filters == {"role": "ADMIN"}
    assert (query.page, query.sort_by, query.sort_order) == (3, "createdAt", "asc")
    assert query.with_page("nonsense").page == 1


def test_params_use_api_names():
    query = ListQuery(filters={"status": "PENDING"}, sort_by="total", sort_order="asc", page=2, limit=20)
    assert query.params() == {"status": "PENDING", "page": 2, "limit": 20, "sortBy": "total", "sortOrder": "asc"}


def test_from_request_validates_sort_and_page():
    request = RequestFactory().get("/", {"search": " shirt ", "sort_by": "password", "page": "-3", "x": "1"})
    query = ListQuery.from_request(request, filters=("search", "role"), sort_fields=("createdAt",),
                                   default_sort="createdAt")
    assert query.filters == {"search": "shirt"}
    assert query.sort_by == "createdAt"
    assert query.sort_order == "desc"
    assert query.page == 1


def test_querystring_overrides():
    query = ListQuery(filters={"search": "mug"}, page=2)
    assert "page=3" in query.querystring(page=3)
    assert "search=mug" in query.querystring(page=3)
