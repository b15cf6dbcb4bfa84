from app.cms.listing import Column, ListingConfig, ListingFilter, Tab, apply_listing, next_sort

CFG = ListingConfig(
    columns=(Column("city", "City"), Column("beds", "Beds")),
    filters=(ListingFilter("destination", "destination_id", "All destinations"),),
    extra_tabs=(Tab("featured", "Featured", match=lambda i: bool(i.get("is_featured"))),),
    default_sort="date",
    default_dir="desc",
)

ITEMS = [
    {"id": 1, "name": "Apollo", "slug": "apollo", "city": "Chennai", "beds": 500, "status": "published",
     "destination_id": 1, "is_featured": True, "updated_at": "2024-03-01T00:00:00"},
    {"id": 2, "name": "Bumrungrad", "slug": "bumrungrad", "city": "Bangkok", "beds": 580, "status": "published",
     "destination_id": 2, "is_featured": False, "updated_at": "2024-05-01T00:00:00"},
    {"id": 3, "name": "Fortis", "slug": "fortis", "city": "Delhi", "beds": None, "status": "draft",
     "destination_id": 1, "is_featured": False, "updated_at": "2024-04-01T00:00:00"},
]


def _ids(page):
    return [i["id"] for i in page.items]


def test_default_sort_is_newest_first():
    page = apply_listing(ITEMS, CFG)
    assert _ids(page) == [2, 3, 1]
    assert page.sort == "date" and page.direction == "desc"


def test_tab_counts_cover_all_items():
    page = apply_listing(ITEMS, CFG, tab="draft")
    assert _ids(page) == [3]
    assert page.counts == {"all": 3, "published": 2, "draft": 1, "featured": 1}


def test_unknown_tab_falls_back_to_all():
    assert apply_listing(ITEMS, CFG, tab="bogus").tab == "all"


def test_search_matches_column_values():
    assert _ids(apply_listing(ITEMS, CFG, q="bangkok")) == [2]
    assert _ids(apply_listing(ITEMS, CFG, q="  FORT ")) == [3]


def test_filter_compares_as_text():
    page = apply_listing(ITEMS, CFG, filters={"destination": "1"}, sort="name", direction="asc")
    assert _ids(page) == [1, 3]


def test_missing_values_sink_in_both_directions():
    asc = apply_listing(ITEMS, CFG, sort="beds", direction="asc")
    desc = apply_listing(ITEMS, CFG, sort="beds", direction="desc")
    assert _ids(asc) == [1, 2, 3]
    assert _ids(desc) == [2, 1, 3]


def test_invalid_sort_uses_default():
    page = apply_listing(ITEMS, CFG, sort="password_hash")
    assert page.sort == "date"


def test_pagination_clamps_page_and_per_page():
    many = [dict(ITEMS[0], id=n, name=f"H{n:03d}") for n in range(1, 121)]
    page = apply_listing(many, CFG, sort="name", direction="asc", per_page="50", page="9")
    assert page.per_page == 50
    assert page.pages == 3
    assert page.page == 3
    assert len(page.items) == 20

    page = apply_listing(many, CFG, per_page="7", page="abc")
    assert page.per_page == 20
    assert page.page == 1


def test_next_sort_toggles():
    assert next_sort("name", "asc", "name") == ("name", "desc")
    assert next_sort("name", "desc", "date") == ("date", "desc")
    assert next_sort("date", "desc", "city") == ("city", "asc")


def test_to_client_shape():
    client_cfg = CFG.to_client()
    assert [t["key"] for t in client_cfg["tabs"]] == ["all", "published", "draft", "featured"]
    assert client_cfg["filters"][0]["field"] == "destination_id"
    assert client_cfg["perPageOptions"] == [20, 50, 100]
