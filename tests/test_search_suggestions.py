import pytest

from portal.services.listings import SUGGESTION_LIMIT, build_search_suggestions, search_suggestions

ROWS = [
    ("La Paz", "La Paz", "Calacoto"),
    ("La Paz", "El Alto", None),
    ("Santa Cruz", "Santa Cruz", "Equipetrol"),
]


@pytest.mark.parametrize("q", [None, "", "a", " l "])
async def test_short_queries_return_nothing_without_touching_the_db(q):
    # db is never used for queries under two characters
    assert await search_suggestions(None, q) == []


def test_locations_are_distinct_and_labelled():
    suggestions = build_search_suggestions("la", ROWS)
    assert [(s["type"], s["value"]) for s in suggestions] == [
        ("location", "La Paz"),
        ("location", "Calacoto"),
        ("property_type", "LAND"),
        ("property_type", "COMMERCIAL"),
    ]
    assert suggestions[1]["label"] == "Calacoto, La Paz"
    assert suggestions[1]["category"] == "Neighbourhood"


def test_city_label_carries_state():
    suggestions = build_search_suggestions("alto", ROWS)
    assert suggestions == [
        {"type": "location", "value": "El Alto", "label": "El Alto, La Paz", "category": "City"},
    ]


def test_numeric_query_offers_price_ranges():
    suggestions = build_search_suggestions("200", [])
    assert [s["value"] for s in suggestions] == [
        "0-200000",
        "200000-500000",
        "500000-1000000",
        "1000000-2000000",
        "2000000-",
    ]
    assert {s["type"] for s in suggestions} == {"price_range"}


def test_suggestions_are_capped():
    rows = [(f"State {i}", f"City {i}", f"Neigh {i}") for i in range(20)]
    assert len(build_search_suggestions("i", rows)) == SUGGESTION_LIMIT
