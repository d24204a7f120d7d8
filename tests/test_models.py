from pathlib import Path

import pytest

from tlpcore.models import (
    ExportNotification,
    Feature,
    Format,
    ImportParams,
    ImportWarning,
    Note,
    Pitch,
    Project,
    Tempo,
    TimeSignature,
    Track,
)


def test_format_file_name():
    assert Format.tlp.extension == ".tlp"
    assert Format.tlp.file_name("song") == "song.tlp"


def test_defaults():
    assert Tempo.default() == Tempo(tick_position=0, bpm=120.0)
    assert TimeSignature.default() == TimeSignature(measure_position=0, numerator=4, denominator=4)


def test_vocabulary_values():
    assert ImportWarning.time_signature_not_found.value == "TimeSignatureNotFound"
    assert ImportWarning.tempo_not_found.value == "TempoNotFound"
    assert ExportNotification.phoneme_reset_required.value == "PhonemeResetRequired"
    assert ExportNotification.pitch_data_exported.value == "PitchDataExported"
    assert Feature("ConvertPitch") is Feature.convert_pitch


def test_has_xsampa_data():
    plain = Note(id=0, key=60, lyric="a", tick_on=0, tick_off=1)
    with_phoneme = Note(id=1, key=60, lyric="a", tick_on=1, tick_off=2, phoneme="a")

    p = Project(format=Format.tlp, name="x", tracks=[Track(id=0, notes=[plain])])
    assert p.has_xsampa_data is False

    p2 = Project(format=Format.tlp, name="x", tracks=[Track(id=0), Track(id=1, notes=[plain, with_phoneme])])
    assert p2.has_xsampa_data is True


def test_project_json_roundtrip():
    p = Project(
        format=Format.tlp,
        name="x",
        input_files=[Path("a.tlp")],
        tracks=[Track(id=0, pitch=Pitch(data=[(0, 0.0), (1000, None)], is_absolute=True))],
        tempos=[Tempo.default()],
        time_signatures=[TimeSignature.default()],
        import_warnings=[ImportWarning.tempo_not_found],
    )
    dumped = p.model_dump(mode="json")
    assert dumped["format"] == "tlp"
    assert dumped["import_warnings"] == ["TempoNotFound"]
    assert dumped["tracks"][0]["pitch"]["data"] == [[0, 0.0], [1000, None]]

    again = Project.model_validate_json(p.model_dump_json())
    assert again == p


def test_import_params_explicit_lyric():
    assert ImportParams(default_lyric="la").default_lyric == "la"
    with pytest.raises(ValueError):
        ImportParams(default_lyric="")


def test_import_params_whitespace_lyric_falls_back(monkeypatch):
    import tlpcore.config as config_module

    monkeypatch.setenv("DEFAULT_LYRIC", "la")
    config_module.get_settings.cache_clear()
    try:
        assert ImportParams(default_lyric="   ").default_lyric == "la"
        assert ImportParams(default_lyric=" ka ").default_lyric == " ka "
    finally:
        config_module.get_settings.cache_clear()


def test_feature_has_no_inert_members():
    assert [f.value for f in Feature] == ["ConvertPitch"]
