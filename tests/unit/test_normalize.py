import pytest

from genproxy.errors import NoTranscriptionFound, UnrecognizedResponse
from genproxy.processing.normalize import as_image_url, extract_transcript, extract_urls


@pytest.mark.parametrize(
    "payload, expected",
    [
        (["http://a/1.png", "http://a/2.png"], ["http://a/1.png", "http://a/2.png"]),
        ({"images": ["http://a/1.png"]}, ["http://a/1.png"]),
        ({"imageUrl": "http://a/1.png"}, ["http://a/1.png"]),
        ({"foo": "http://a/1.png", "bar": 5}, ["http://a/1.png"]),
    ],
)
def test_extract_urls_known_shapes(payload, expected):
    assert extract_urls(payload) == expected


def test_unrecognized_payload_is_an_error():
    with pytest.raises(UnrecognizedResponse):
        extract_urls({"foo": "bar"})


def test_list_elements_use_field_priority_and_drop_empties():
    payload = [
        {"url": "http://a/1.png", "image": "http://ignored"},
        {"image": "http://a/2.png"},
        {"output": "http://a/3.png"},
        {"nothing": True},
        42,
    ]
    assert extract_urls(payload) == ["http://a/1.png", "http://a/2.png", "http://a/3.png"]


def test_provider_envelope_prefers_outputs():
    payload = {
        "id": "abc",
        "status": "completed",
        "has_nsfw_contents": [False],
        "outputs": ["https://cdn/out.mp4"],
    }
    assert extract_urls(payload) == ["https://cdn/out.mp4"]


def test_any_list_field_is_used_when_no_known_field():
    assert extract_urls({"results": [{"url": "http://a/x.png"}]}) == ["http://a/x.png"]


def test_empty_collection_falls_through_to_later_rules():
    payload = {"outputs": [], "image": "http://a/single.png"}
    assert extract_urls(payload) == ["http://a/single.png"]


def test_scan_keeps_encounter_order_and_inline_images():
    payload = {"b": "data:image/png;base64,AAA", "a": "https://a/1.png", "c": "ftp://nope"}
    assert extract_urls(payload) == ["data:image/png;base64,AAA", "https://a/1.png"]


def test_empty_list_is_unrecognized():
    with pytest.raises(UnrecognizedResponse):
        extract_urls([])


@pytest.mark.parametrize(
    "payload",
    [
        {"outputs": ["hello world"]},
        {"outputs": [{"text": "hello world"}]},
        {"outputs": [{"transcription": "hello world"}]},
        {"text": "hello world"},
        {"transcription": "  hello world  "},
    ],
)
def test_extract_transcript_shapes(payload):
    assert extract_transcript(payload) == "hello world"


def test_transcript_priority_prefers_outputs():
    assert extract_transcript({"outputs": ["first"], "text": "second"}) == "first"


def test_blank_transcript_is_an_error():
    with pytest.raises(NoTranscriptionFound):
        extract_transcript({"outputs": [""], "text": "   "})
    with pytest.raises(NoTranscriptionFound):
        extract_transcript({"id": "abc"})


def test_as_image_url_wraps_bare_base64():
    assert as_image_url("iVBORw0KGgo=", "png") == "data:image/png;base64,iVBORw0KGgo="
    assert as_image_url("iVBORw0KGgo=", "jpg") == "data:image/jpeg;base64,iVBORw0KGgo="
    assert as_image_url("https://a/1.png") == "https://a/1.png"
    assert as_image_url("data:image/webp;base64,AAAA") == "data:image/webp;base64,AAAA"
