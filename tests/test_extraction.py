from src.gemini_proxy.extraction import decode_generation, decode_generation_body
from src.gemini_proxy.types import GenerationError, GenerationRefusal, GenerationSuccess

from conftest import generation_body

def test_success_extracts_text_and_usage():
    data = generation_body("hello")
    out = decode_generation(data)
    assert isinstance(out, GenerationSuccess)
    assert out.text == "hello"
    assert out.response is data
    assert out.usage_metadata == {"promptTokenCount": 3, "candidatesTokenCount": 1, "totalTokenCount": 4}

def test_empty_string_text_is_success():
    out = decode_generation(generation_body(""))
    assert isinstance(out, GenerationSuccess)
    assert out.text == ""

def test_top_level_error():
    out = decode_generation({"error": {"code": 400, "message": "API key not valid", "status": "INVALID_ARGUMENT"}})
    assert isinstance(out, GenerationError)
    assert out.message == "API key not valid"

def test_no_candidates_variants():
    for data in ({}, {"candidates": []}, {"candidates": None}, {"candidates": "nope"}):
        out = decode_generation(data)
        assert isinstance(out, GenerationRefusal)
        assert out.reason == "no_candidates"

def test_no_candidates_reports_block_reason():
    out = decode_generation({"promptFeedback": {"blockReason": "SAFETY"}})
    assert out.reason == "no_candidates"
    assert "SAFETY" in out.message

def test_no_parts():
    for cand in ({}, {"content": None}, {"content": {}}, {"content": {"parts": []}}):
        out = decode_generation({"candidates": [dict(cand, finishReason="SAFETY")]})
        assert isinstance(out, GenerationRefusal)
        assert out.reason == "no_parts"
        assert "SAFETY" in out.message

def test_no_text():
    for part in ({}, {"text": None}, {"inlineData": {"mimeType": "image/png"}}):
        out = decode_generation({"candidates": [{"content": {"parts": [part]}}]})
        assert isinstance(out, GenerationRefusal)
        assert out.reason == "no_text"

def test_non_object_response():
    out = decode_generation([1, 2])
    assert isinstance(out, GenerationRefusal)
    assert out.reason == "invalid_json"

def test_invalid_json_body():
    out = decode_generation_body(b"<html>oops</html>")
    assert isinstance(out, GenerationRefusal)
    assert out.reason == "invalid_json"

def test_empty_error_object_is_still_an_error():
    out = decode_generation({"error": {}, "candidates": []})
    assert isinstance(out, GenerationError)
    assert out.message == "upstream returned an error"

def test_null_error_is_ignored():
    out = decode_generation(dict(generation_body("ok"), error=None))
    assert isinstance(out, GenerationSuccess)
