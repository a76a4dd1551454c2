"""
Notes RPC Backend — Request Decoder Unit Tests
================================================

What:  Tests for decode_payload, the pure request → payload function.
How:   Plain dicts stand in for headers and query parameters; no HTTP.

What we test:
    ✅ GET reads the `input` query parameter; absent parameter → empty input
    ✅ POST requires a JSON content type
    ✅ Batch unwrapping of the "0" key
    ✅ Objects that already carry `input` are passed through unchanged
    ✅ Every decode failure collapses to {"input": {}}
"""

import json

from notes_rpc.routes.decoder import decode_payload, is_batch

JSON_HEADERS = {"content-type": "application/json"}


def _get(query, batch=False):
    return decode_payload("GET", {}, query, None, batch)


def _post(body, headers=JSON_HEADERS, batch=False):
    raw = body if isinstance(body, bytes) else json.dumps(body).encode()
    return decode_payload("POST", headers, {}, raw, batch)


class TestReadStyle:
    """GET payloads come from the `input` query parameter."""

    def test_input_parameter_is_wrapped(self):
        assert _get({"input": '{"noteId": "n1"}'}) == {"input": {"noteId": "n1"}}

    def test_missing_parameter_gives_empty_input(self):
        assert _get({}) == {"input": {}}

    def test_empty_parameter_gives_empty_input(self):
        assert _get({"input": ""}) == {"input": {}}

    def test_malformed_json_gives_empty_input(self):
        assert _get({"input": "{not json"}) == {"input": {}}

    def test_scalar_value_is_wrapped(self):
        assert _get({"input": "5"}) == {"input": 5}

    def test_method_is_case_insensitive(self):
        assert decode_payload("get", {}, {"input": '{"a": 1}'}, None, False) == {"input": {"a": 1}}


class TestWriteStyle:
    """POST payloads come from a JSON body."""

    def test_json_body_is_wrapped(self):
        assert _post({"title": "A", "content": "x"}) == {
            "input": {"title": "A", "content": "x"}
        }

    def test_content_type_with_charset_is_accepted(self):
        headers = {"content-type": "application/json; charset=utf-8"}
        assert _post({"noteId": "n1"}, headers=headers) == {"input": {"noteId": "n1"}}

    def test_title_case_header_key_is_accepted(self):
        assert _post({"noteId": "n1"}, headers={"Content-Type": "application/json"}) == {
            "input": {"noteId": "n1"}
        }

    def test_other_content_type_gives_empty_input(self):
        assert _post({"title": "A"}, headers={"content-type": "text/plain"}) == {"input": {}}

    def test_missing_content_type_gives_empty_input(self):
        assert _post({"title": "A"}, headers={}) == {"input": {}}

    def test_malformed_body_gives_empty_input(self):
        assert _post(b'{"title": ') == {"input": {}}

    def test_empty_body_gives_empty_input(self):
        assert _post(b"") == {"input": {}}

    def test_non_utf8_body_gives_empty_input(self):
        assert _post(b"\xff\xfe\xfa") == {"input": {}}

    def test_body_with_input_key_is_returned_as_is(self):
        body = {"input": {"noteId": "n1"}, "extra": True}
        assert _post(body) == body

    def test_null_input_key_is_returned_as_is(self):
        assert _post({"input": None}) == {"input": None}


class TestOtherMethods:
    def test_put_gives_empty_input(self):
        assert decode_payload("PUT", JSON_HEADERS, {}, b'{"a": 1}', False) == {"input": {}}

    def test_delete_gives_empty_input(self):
        assert decode_payload("DELETE", {}, {"input": '{"a": 1}'}, None, False) == {"input": {}}


class TestBatchMode:
    """Batch mode collapses a {"0": ...} envelope to its first call."""

    def test_is_batch_uses_presence_only(self):
        assert is_batch({"batch": "1"})
        assert is_batch({"batch": ""})
        assert not is_batch({"input": "{}"})

    def test_post_batch_unwraps_first_call(self):
        assert _post({"0": {"title": "A", "content": "x"}}, batch=True) == {
            "input": {"title": "A", "content": "x"}
        }

    def test_get_batch_unwraps_first_call(self):
        assert _get({"input": '{"0": {"noteId": "n1"}}'}, batch=True) == {
            "input": {"noteId": "n1"}
        }

    def test_batch_unwraps_null_entry(self):
        assert _post({"0": None}, batch=True) == {"input": None}

    def test_batch_without_zero_key_falls_back_to_wrapping(self):
        assert _post({"title": "A"}, batch=True) == {"input": {"title": "A"}}

    def test_zero_key_is_ignored_outside_batch_mode(self):
        assert _post({"0": {"title": "A"}}) == {"input": {"0": {"title": "A"}}}

    def test_batch_zero_key_wins_over_input_key(self):
        assert _post({"0": {"a": 1}, "input": {"b": 2}}, batch=True) == {"input": {"a": 1}}
