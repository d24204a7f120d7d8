"""
TLP -> canonical Project.

Pipeline: read text -> decode snapshots -> select latest -> normalize.
A failure at any step raises; no partial Project is returned.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from tlpcore.config import get_settings
from tlpcore.models import (
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
from tlpcore.tlp_schema import TlpDocument, TlpTrack
from tlpcore.tlp_selector import TlpDecodeError, decode_documents, select_latest
from tlpcore.validation import validate_notes

logger = logging.getLogger(__name__)

FORMAT = Format.tlp

# TLP tempo positions are stored at 1,470,000 source ticks per canonical tick
TICK_RATE = 1_470_000


def _to_tick(value: float) -> int:
    return int(round(value))


def tempo_tick(pos: float) -> int:
    # truncates toward zero, also for negative positions
    ticks = int(pos)
    if ticks < 0:
        return -(-ticks // TICK_RATE)
    return ticks // TICK_RATE


def _placeholder_pitch() -> Pitch:
    # Pitch bends are not converted yet: every track gets a flat absolute curve.
    return Pitch(data=[(0, 0.0), (1000, None)], is_absolute=True)


def _parse_track(track: TlpTrack, track_index: int, params: ImportParams) -> Track:
    notes: List[Note] = []
    flattened = ((part.pos, note) for part in track.parts for note in part.notes)
    for index, (part_pos, note) in enumerate(flattened):
        tick_on = _to_tick(part_pos + note.pos)
        notes.append(
            Note(
                id=index,
                key=note.pitch,
                lyric=note.lyric if note.lyric.strip() else params.default_lyric,
                tick_on=tick_on,
                tick_off=tick_on + _to_tick(note.dur),
                phoneme=note.properties.phoneme if note.properties else None,
            )
        )

    return validate_notes(
        Track(
            id=track_index,
            name=track.name,
            notes=notes,
            pitch=_placeholder_pitch(),
        )
    )


def normalize_document(
    document: TlpDocument,
    params: ImportParams,
    *,
    name: str,
    input_file: Optional[Path] = None,
    warnings: Optional[List[ImportWarning]] = None,
) -> Project:
    """
    Map one selected snapshot onto the canonical model.

    `warnings` may already hold entries from the decode step; fallbacks are
    appended to it.
    """
    warnings = list(warnings or [])

    time_signatures = [
        TimeSignature(measure_position=ts.bar_index, numerator=ts.numerator, denominator=ts.denominator)
        for ts in document.time_signatures
    ]
    if not time_signatures:
        logger.warning("No time signature in %r, using 4/4", name)
        time_signatures = [TimeSignature.default()]
        warnings.append(ImportWarning.time_signature_not_found)

    tempos = [Tempo(tick_position=tempo_tick(t.pos), bpm=t.bpm) for t in document.tempos]
    if not tempos:
        logger.warning("No tempo in %r, using default", name)
        tempos = [Tempo.default()]
        warnings.append(ImportWarning.tempo_not_found)

    tracks = [_parse_track(track, index, params) for index, track in enumerate(document.tracks)]

    if any(part.has_pitch_data() for track in document.tracks for part in track.parts):
        warnings.append(ImportWarning.pitch_data_not_converted)

    return Project(
        format=FORMAT,
        input_files=[input_file] if input_file is not None else [],
        name=name,
        tracks=tracks,
        time_signatures=time_signatures,
        tempos=tempos,
        measure_prefix=0,
        import_warnings=warnings,
    )


def parse_text(
    text: str,
    params: Optional[ImportParams] = None,
    *,
    name: str,
    input_file: Optional[Path] = None,
    skip_corrupt: Optional[bool] = None,
) -> Project:
    if params is None:
        params = ImportParams()
    if skip_corrupt is None:
        skip_corrupt = get_settings().skip_corrupt_fragments

    warnings: List[ImportWarning] = []
    documents = decode_documents(text, skip_corrupt=skip_corrupt, warnings=warnings)
    document = select_latest(documents)

    project = normalize_document(document, params, name=name, input_file=input_file, warnings=warnings)
    logger.info(
        "Imported %r: snapshot v%d of %d, %d tracks, %d notes, warnings=%s",
        name,
        document.version,
        len(documents),
        len(project.tracks),
        sum(len(t.notes) for t in project.tracks),
        [w.value for w in project.import_warnings],
    )
    return project


def parse(
    file: str | Path,
    params: Optional[ImportParams] = None,
    *,
    skip_corrupt: Optional[bool] = None,
) -> Project:
    """Read a .tlp file from disk and import it."""
    file = Path(file)
    if not file.exists() or not file.is_file():
        raise FileNotFoundError(f"tlp file not found: {file}")

    try:
        text = file.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise TlpDecodeError(f"{file.name} is not UTF-8 text") from e

    return parse_text(text, params, name=file.stem, input_file=file, skip_corrupt=skip_corrupt)
