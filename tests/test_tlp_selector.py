from __future__ import annotations

import json

import pytest

from tlpcore.models import ImportWarning
from tlpcore.tlp_schema import TlpDocument
from tlpcore.tlp_selector import (
    TlpDecodeError,
    decode_documents,
    parse_fragment,
    select_latest,
    split_fragments,
)


def test_split_fragments_drops_blanks_and_nuls():
    text = "\u0000\u0000 {\"version\": 1} \u0000\n\u0000{\"version\": 2}\u0000  "
    assert split_fragments(text) == ['{"version": 1}', '{"version": 2}']


def test_split_fragments_empty():
    assert split_fragments("") == []
    assert split_fragments("\u0000 \u0000\n") == []


def test_parse_fragment_ignores_unknown_keys():
    doc = parse_fragment(json.dumps({"version": 3, "someFutureField": {"x": 1}}))
    assert isinstance(doc, TlpDocument)
    assert doc.version == 3
    assert doc.tracks == []


def test_parse_fragment_invalid_json():
    with pytest.raises(TlpDecodeError):
        parse_fragment("{not json")


def test_parse_fragment_schema_mismatch():
    with pytest.raises(TlpDecodeError):
        parse_fragment(json.dumps({"version": "not a number"}))
    with pytest.raises(TlpDecodeError):
        parse_fragment(json.dumps([1, 2, 3]))


def test_select_latest_picks_max_version():
    docs = [TlpDocument(version=v) for v in (2, 7, 3)]
    assert select_latest(docs) is docs[1]


def test_select_latest_tie_prefers_last():
    a = TlpDocument(version=4, tracks=[])
    b = TlpDocument(version=4, tracks=[{"name": "later"}])
    assert select_latest([a, b]) is b


def test_select_latest_empty():
    with pytest.raises(TlpDecodeError):
        select_latest([])


def test_decode_documents_no_snapshot():
    with pytest.raises(TlpDecodeError):
        decode_documents("\u0000\u0000")


def test_decode_documents_fail_fast():
    text = '{"version": 1}\u0000{oops}\u0000{"version": 2}'
    with pytest.raises(TlpDecodeError):
        decode_documents(text)


def test_decode_documents_skip_corrupt():
    warnings = []
    text = '{"version": 1}\u0000{oops}\u0000{"version": 2}'
    docs = decode_documents(text, skip_corrupt=True, warnings=warnings)
    assert [d.version for d in docs] == [1, 2]
    assert warnings == [ImportWarning.corrupt_fragment_skipped]


def test_decode_documents_skip_corrupt_all_bad():
    with pytest.raises(TlpDecodeError):
        decode_documents("{oops}\u0000[1,", skip_corrupt=True)
