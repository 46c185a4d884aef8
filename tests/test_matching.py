import pytest

from home.models.user import UserRole
from home.schemas.contractor import Contractor
from home.schemas.ticket import Ticket
from home.services.matching import (
    categories_match,
    estimate_distance,
    match_contractors,
    rank_with_distance,
    serves_location,
)


def _ticket(category: str) -> Ticket:
    return Ticket(
        title="Issue",
        description="Something broke",
        category=category,
        submitted_by="tenant@example.com",
        submitted_by_role=UserRole.TENANT,
    )


def _contractor(cid: str, rating: float, specialization=("Plumbing",), areas=None) -> Contractor:
    return Contractor(
        id=cid,
        name=cid.title(),
        specialization=specialization,
        service_areas=areas if areas is not None else {"Illinois": ("Springfield",)},
        rating=rating,
    )


@pytest.mark.parametrize(
    "a, b",
    [
        ("Plumbing", "plumbing"),
        ("Appliance", "Appliances"),
        (" General Repair ", "General Repairs"),
        ("HVAC", "hvac systems"),
        ("Electrical", "Electric"),
    ],
)
def test_categories_match(a, b):
    assert categories_match(a, b)
    assert categories_match(b, a)


@pytest.mark.parametrize("a, b", [("Plumbing", "Electrical"), ("Roofing", "Painting")])
def test_categories_do_not_match(a, b):
    assert not categories_match(a, b)


def test_single_letter_is_not_singularized():
    assert categories_match("s", "s")
    assert not categories_match("s", "x")


def test_serves_location_is_case_and_space_insensitive():
    contractor = _contractor("a", 4.0, areas={" illinois ": (" SPRINGFIELD ",)})
    assert serves_location(contractor, "Springfield", "Illinois")
    assert not serves_location(contractor, "Chicago", "Illinois")
    assert not serves_location(contractor, "Springfield", "Ohio")


@pytest.mark.parametrize("city, state", [(None, "Illinois"), ("Springfield", None), ("", "")])
def test_serves_location_needs_city_and_state(city, state):
    assert not serves_location(_contractor("a", 4.0), city, state)


def test_match_sorts_by_rating_and_keeps_ties_stable():
    roster = [
        _contractor("low", 3.0),
        _contractor("tie-first", 4.5),
        _contractor("wrong-trade", 5.0, specialization=("Roofing",)),
        _contractor("tie-second", 4.5),
        _contractor("far", 5.0, areas={"Ohio": ("Columbus",)}),
        _contractor("top", 4.9, specialization=("plumbing services",)),
    ]
    matched = match_contractors(_ticket("Plumbing"), "Springfield", "Illinois", roster)
    assert [c.id for c in matched] == ["top", "tie-first", "tie-second", "low"]


def test_no_match_is_an_empty_list():
    assert match_contractors(_ticket("Roofing"), "Springfield", "Illinois", [_contractor("a", 1)]) == []


@pytest.mark.parametrize(
    "city1, state1, city2, state2, expected",
    [
        ("Springfield", "Illinois", "springfield ", "ILLINOIS", 0.0),
        ("Springfield", "Illinois", "Chicago", "Illinois", 50.0),
        ("Springfield", "Illinois", "Columbus", "Ohio", 200.0),
        (None, "Illinois", "Chicago", "Illinois", 200.0),
    ],
)
def test_estimate_distance(city1, state1, city2, state2, expected):
    assert estimate_distance(city1, state1, city2, state2) == expected


def test_rank_with_distance_reports_distance(contractors):
    matches = rank_with_distance(_ticket("Plumbing"), "Springfield", "Illinois", contractors)
    assert [(m.contractor.id, m.distance) for m in matches] == [("contractor-plumber", 0.0)]
