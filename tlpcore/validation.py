"""
Post-construction note checks for canonical tracks.

Codecs build candidate notes; this module decides whether a track is usable.
"""
from __future__ import annotations

from tlpcore.models import Track


class NoteValidationError(ValueError):
    def __init__(self, track_id: int, note_id: int, reason: str) -> None:
        super().__init__(f"Track[{track_id}] note[{note_id}]: {reason}")
        self.track_id = track_id
        self.note_id = note_id
        self.reason = reason


def validate_notes(track: Track) -> Track:
    """
    Raise NoteValidationError on the first bad note, otherwise return the
    track unchanged.

    Rules:
    - tick_on >= 0
    - tick_off > tick_on
    - no overlap: after a stable sort by tick_on, each note starts at or after
      the previous note's tick_off
    """
    for note in track.notes:
        if note.tick_on < 0:
            raise NoteValidationError(track.id, note.id, f"negative tick_on ({note.tick_on})")
        if note.tick_off <= note.tick_on:
            raise NoteValidationError(
                track.id, note.id, f"tick_off ({note.tick_off}) must be greater than tick_on ({note.tick_on})"
            )

    ordered = sorted(track.notes, key=lambda n: n.tick_on)
    for prev, cur in zip(ordered, ordered[1:]):
        if cur.tick_on < prev.tick_off:
            raise NoteValidationError(
                track.id, cur.id, f"overlaps note[{prev.id}] ({prev.tick_on}-{prev.tick_off})"
            )

    return track
