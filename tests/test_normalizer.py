import json
import math
import random

import pytest
from pydantic import ValidationError

from travel_chat.exceptions.location_exceptions import (
    InvalidCoordinatesError,
    LocationExtractionError,
    LocationValidationError,
    MalformedJsonError,
    NoLocationsFoundError,
)
from travel_chat.models.location_models import NormalizationMode, Position
from travel_chat.services.location_service.lookup import lookup_description
from travel_chat.services.location_service.normalizer import (
    extract_locations_from_response,
    location_to_payload,
    normalize_locations,
    parse_json_locations,
)

EIFFEL = '{"locations":[{"name":"Eiffel Tower","coordinates":[48.8584,2.2945]}]}'
BAD = '{"locations":[{"name":"Bad","coordinates":[200,0]}]}'


def test_single_location_with_defaults(rng):
    locations = parse_json_locations(EIFFEL, rng)
    assert len(locations) == 1
    loc = locations[0]
    assert loc.name == "Eiffel Tower"
    assert loc.position.as_pair() == (48.8584, 2.2945)
    assert loc.rating == 4.5
    assert 10000 <= loc.reviews < 50000
    assert loc.image_url


def test_out_of_range_strict_raises_with_name(rng):
    with pytest.raises(InvalidCoordinatesError) as exc:
        parse_json_locations(BAD, rng)
    assert exc.value.location_name == "Bad"
    assert "Bad" in str(exc.value)


def test_out_of_range_permissive_returns_empty(rng):
    assert extract_locations_from_response(BAD, rng) == []


def test_permissive_filters_and_keeps_order(rng):
    data = {"locations": [
        {"name": "Colosseum", "coordinates": [41.8902, 12.4922]},
        {"name": "Nowhere", "coordinates": [0, 500]},
        {"name": "Pantheon", "coordinates": [41.8986, 12.4769]},
    ]}
    locations = normalize_locations(data, NormalizationMode.PERMISSIVE, rng)
    assert [loc.name for loc in locations] == ["Colosseum", "Pantheon"]


def test_strict_aborts_whole_batch(rng):
    data = {"locations": [
        {"name": "Colosseum", "coordinates": [41.8902, 12.4922]},
        {"name": "Nowhere", "coordinates": [0, 500]},
    ]}
    with pytest.raises(InvalidCoordinatesError) as exc:
        normalize_locations(data, NormalizationMode.STRICT, rng)
    assert exc.value.location_name == "Nowhere"


@pytest.mark.parametrize("coords", [
    ["48.8", 2.3],
    [True, 2.3],
    [48.8, 2.3, 1.0],
    [48.8],
    None,
    "48.8,2.3",
    [math.inf, 0],
    [math.nan, 0],
    [-91, 0],
    [0, 180.5],
])
def test_malformed_coordinates_rejected(coords, rng):
    data = {"locations": [{"name": "Odd", "coordinates": coords}]}
    with pytest.raises(InvalidCoordinatesError):
        normalize_locations(data, NormalizationMode.STRICT, rng)
    assert normalize_locations(data, NormalizationMode.PERMISSIVE, rng) == []


def test_boundary_coordinates_accepted(rng):
    data = {"locations": [{"name": "Corner", "coordinates": [-90, 180]}]}
    assert normalize_locations(data, rng=rng)[0].position.as_pair() == (-90.0, 180.0)


def test_batch_ids_are_unique(rng):
    data = {"locations": [
        {"name": f"Place {i}", "coordinates": [i, i]} for i in range(6)
    ]}
    ids = [loc.id for loc in normalize_locations(data, rng=rng)]
    assert len(set(ids)) == len(ids)


def test_round_trip_preserves_fields(rng):
    first = parse_json_locations(json.dumps({"locations": [{
        "name": "  Trevi Fountain ",
        "coordinates": [41.9009, 12.4833],
        "rating": 4.8,
        "reviews": 1200,
        "description": "Baroque fountain",
        "image": "https://example.com/trevi.jpg",
        "city": "Rome",
        "country": "Italy",
    }]}), rng)[0]
    assert first.name == "Trevi Fountain"

    again = parse_json_locations(json.dumps({"locations": [location_to_payload(first)]}), rng)[0]
    assert again.name == first.name
    assert again.position == first.position
    assert again.description == first.description
    assert again.rating == 4.8
    assert again.reviews == 1200
    assert again.image_url == "https://example.com/trevi.jpg"
    assert (again.city, again.country) == ("Rome", "Italy")


def test_uncoercible_fields_fall_back_to_defaults(rng):
    data = {"name": "Colosseum", "coordinates": [41.8902, 12.4922], "rating": "great", "reviews": -5}
    loc = normalize_locations(data, rng=rng)[0]
    assert loc.rating == 4.5
    assert 10000 <= loc.reviews < 50000


def test_numeric_strings_are_coerced(rng):
    data = {"name": "Colosseum", "coordinates": [41.8902, 12.4922], "rating": "4.2", "reviews": "300"}
    loc = normalize_locations(data, rng=rng)[0]
    assert loc.rating == 4.2
    assert loc.reviews == 300


def test_description_defaults_depend_on_mode(rng):
    data = {"locations": [
        {"name": "Colosseum", "coordinates": [41.8902, 12.4922]},
        {"name": "Tiny Bakery", "coordinates": [41.0, 12.0]},
    ]}
    strict = normalize_locations(data, NormalizationMode.STRICT, rng)
    assert [loc.description for loc in strict] == ["", ""]

    permissive = normalize_locations(data, NormalizationMode.PERMISSIVE, rng)
    assert permissive[0].description == lookup_description("Colosseum")
    assert permissive[1].description == "Visit Tiny Bakery"


def test_seeded_random_source_is_deterministic():
    first = parse_json_locations(EIFFEL, random.Random(42))[0]
    second = parse_json_locations(EIFFEL, random.Random(42))[0]
    assert first.reviews == second.reviews


def test_bare_location_object_embedded_in_prose(rng):
    text = 'You will love this: {"name": "Colosseum", "coordinates": [41.8902, 12.4922]} enjoy!'
    locations = parse_json_locations(text, rng)
    assert [loc.name for loc in locations] == ["Colosseum"]


def test_malformed_json(rng):
    text = 'Here: {"locations": [oops]}'
    with pytest.raises(MalformedJsonError) as exc:
        parse_json_locations(text, rng)
    assert "oops" in exc.value.snippet
    assert extract_locations_from_response(text, rng) == []


def test_no_json_at_all(rng):
    with pytest.raises(NoLocationsFoundError):
        parse_json_locations("Just some friendly prose.", rng)
    assert extract_locations_from_response("Just some friendly prose.", rng) == []


def test_empty_locations_list(rng):
    with pytest.raises(NoLocationsFoundError):
        parse_json_locations('{"locations": []}', rng)
    assert extract_locations_from_response('{"locations": []}', rng) == []


@pytest.mark.parametrize("raw", [
    {"coordinates": [1, 2]},
    {"name": "   ", "coordinates": [1, 2]},
    {"name": 42, "coordinates": [1, 2]},
    "Eiffel Tower",
])
def test_records_without_usable_name(raw, rng):
    with pytest.raises(LocationValidationError):
        normalize_locations([raw], NormalizationMode.STRICT, rng)
    assert normalize_locations([raw], NormalizationMode.PERMISSIVE, rng) == []


def test_locations_are_immutable(rng):
    loc = parse_json_locations(EIFFEL, rng)[0]
    with pytest.raises(ValidationError):
        loc.name = "Other"


def test_position_rejects_out_of_range():
    with pytest.raises(ValidationError):
        Position(lat=91, lng=0)
    with pytest.raises(ValidationError):
        Position(lat=0, lng=float("inf"))


COLOSSEUM = {"name": "Colosseum", "coordinates": [41.8902, 12.4922]}


def test_coordinate_too_large_for_a_float(rng):
    data = {"locations": [{"name": "Huge", "coordinates": [10 ** 400, 0]}, COLOSSEUM]}
    kept = normalize_locations(data, NormalizationMode.PERMISSIVE, rng)
    assert [loc.name for loc in kept] == ["Colosseum"]

    with pytest.raises(InvalidCoordinatesError) as exc:
        normalize_locations(data, NormalizationMode.STRICT, rng)
    assert exc.value.location_name == "Huge"


def test_rating_too_large_for_a_float_falls_back(rng):
    loc = normalize_locations([{**COLOSSEUM, "rating": 10 ** 400}], NormalizationMode.STRICT, rng)[0]
    assert loc.rating == 4.5


def test_integer_literal_past_the_digit_limit(rng):
    text = '{"locations":[{"name":"A","coordinates":[1' + "0" * 5000 + ',2]}]}'
    assert extract_locations_from_response(text, rng) == []
    with pytest.raises(LocationExtractionError):
        parse_json_locations(text, rng)


def test_bare_object_without_coordinates_is_reported_by_name(rng):
    with pytest.raises(InvalidCoordinatesError) as exc:
        normalize_locations({"name": "X"}, NormalizationMode.STRICT, rng)
    assert exc.value.location_name == "X"

    with pytest.raises(InvalidCoordinatesError) as exc:
        parse_json_locations('Try this: {"name": "X"}', rng)
    assert exc.value.location_name == "X"
    assert extract_locations_from_response('{"name": "X"}', rng) == []
