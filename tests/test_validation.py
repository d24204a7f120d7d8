import pytest

from tlpcore.models import Note, Track
from tlpcore.validation import NoteValidationError, validate_notes


def _note(i: int, on: int, off: int) -> Note:
    return Note(id=i, key=60, lyric="a", tick_on=on, tick_off=off)


def test_valid_track_is_returned_unchanged():
    track = Track(id=0, notes=[_note(0, 0, 480), _note(1, 480, 960)])
    assert validate_notes(track) is track


def test_empty_track_is_valid():
    track = Track(id=3)
    assert validate_notes(track) is track


def test_unsorted_but_disjoint_notes_are_valid():
    track = Track(id=0, notes=[_note(0, 960, 1200), _note(1, 0, 480)])
    assert validate_notes(track) is track


def test_zero_length_note_rejected():
    with pytest.raises(NoteValidationError) as exc:
        validate_notes(Track(id=2, notes=[_note(0, 0, 480), _note(1, 480, 480)]))
    assert exc.value.track_id == 2
    assert exc.value.note_id == 1


def test_negative_tick_rejected():
    with pytest.raises(NoteValidationError):
        validate_notes(Track(id=0, notes=[_note(0, -10, 480)]))


def test_overlap_rejected():
    with pytest.raises(NoteValidationError) as exc:
        validate_notes(Track(id=0, notes=[_note(0, 0, 500), _note(1, 480, 960)]))
    assert exc.value.note_id == 1
    assert "overlaps" in str(exc.value)
