import pytest

from travel_chat.services.location_service.stream_splitter import (
    normalize_whitespace,
    scan_json_object,
    split_streaming_message,
)

JSON_REPLY = (
    "Top picks in Paris.\n"
    "1. Eiffel Tower - iconic tower.\n"
    '{"locations": [{"name": "Eiffel Tower", "coordinates": [48.8584, 2.2945]}]}'
)
WEATHER_REPLY = "Sure thing! I should check the weather in Paris. Anything else?"


def test_empty_text():
    result = split_streaming_message("")
    assert result.text_content == ""
    assert result.json_content is None
    assert result.weather_location is None


def test_prose_only_is_whitespace_normalized():
    result = split_streaming_message("  Hello   world\n\n\n\nBye\t\tnow  ")
    assert result.text_content == "Hello world\n\nBye now"
    assert result.json_content is None


def test_partial_json_returns_prose_without_error():
    result = split_streaming_message('Here are some places... {"locations": [{"name": "X"')
    assert result.json_content is None
    assert result.weather_location is None
    assert result.text_content == "Here are some places..."


def test_complete_json_block_is_separated_from_prose():
    block = '{"locations": [{"name": "Louvre", "coordinates": [48.8606, 2.3376]}]}'
    result = split_streaming_message("Here are some places:\n" + block)
    assert result.json_content == block
    assert result.text_content == "Here are some places:"


def test_code_fence_opener_is_not_displayed():
    result = split_streaming_message('Enjoy!\n```json\n{"locations": []}\n```')
    assert result.json_content == '{"locations": []}'
    assert result.text_content == "Enjoy!"


def test_braces_inside_strings_do_not_close_the_object():
    text = '{"locations": [{"name": "Curly } Cafe", "coordinates": [1, 2]}]}'
    assert split_streaming_message(text).json_content == text


def test_mid_sentence_brace_is_not_a_json_start():
    result = split_streaming_message("Use {braces} wisely")
    assert result.json_content is None
    assert result.text_content == "Use {braces} wisely"


def test_scan_handles_nesting_and_escapes():
    text = 'x {"a": {"b": "quote \\" and }"}, "c": [1]} trailing'
    end = scan_json_object(text, 2)
    assert text[2:end] == '{"a": {"b": "quote \\" and }"}, "c": [1]}'
    assert scan_json_object('{"a": {"b": 1}', 0) is None


def test_weather_marker_takes_precedence():
    result = split_streaming_message(WEATHER_REPLY)
    assert result.weather_location == "Paris"
    assert result.json_content is None
    assert result.text_content == "Sure thing!"


def test_unterminated_weather_place_waits_for_more_text():
    assert split_streaming_message("I should check the weather in Par").weather_location is None
    completed = split_streaming_message("I should check the weather in Paris", complete=True)
    assert completed.weather_location == "Paris"


def test_weather_marker_after_json_is_ignored():
    text = 'Here:\n{"locations": []}\nLet me check the weather in Rome.'
    result = split_streaming_message(text)
    assert result.json_content == '{"locations": []}'
    assert result.weather_location is None


def test_classification_is_stable_under_growth():
    for full in (JSON_REPLY, WEATHER_REPLY):
        final = split_streaming_message(full)
        for cut in range(len(full) + 1):
            partial = split_streaming_message(full[:cut])
            if partial.json_content is not None:
                assert partial.json_content == final.json_content
            if partial.weather_location is not None:
                assert partial.weather_location == final.weather_location
            assert not (partial.json_content and partial.weather_location)


def test_normalize_whitespace():
    assert normalize_whitespace("a\n\n\n\nb   c") == "a\n\nb c"


@pytest.mark.parametrize("place", ["St. Petersburg", "Mt. Fuji", "Ste. Foy"])
def test_abbreviated_place_names_are_kept_whole(place):
    text = f"I should check the weather in {place}. Back soon!"
    assert split_streaming_message(text).weather_location == place
    assert split_streaming_message(f"I should check the weather in {place}", complete=True).weather_location == place

    # the abbreviation dot alone never closes the name
    cut = text.index(".") + 1
    assert split_streaming_message(text[:cut]).weather_location is None
