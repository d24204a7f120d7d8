"""
Canonical Project -> TLP.

The payload is a single current-era snapshot. Pitch curves, voices and
automation are not written; the notifications tell the caller what the
target tool will lose or reset.
"""
from __future__ import annotations

import logging
from typing import Iterable, List

from tlpcore.models import ExportNotification, ExportResult, Feature, Format, Project, Track
from tlpcore.tlp_import import TICK_RATE
from tlpcore.tlp_schema import (
    TlpDocument,
    TlpNote,
    TlpNoteProperties,
    TlpPart,
    TlpTempo,
    TlpTimeSignature,
    TlpTrack,
)

logger = logging.getLogger(__name__)

FORMAT = Format.tlp
MEDIA_TYPE = "application/octet-stream"
EXPORT_VERSION = 1


def _materialize_track(track: Track) -> TlpTrack:
    # one part from tick 0 to the end of the last note
    end = max((n.tick_off for n in track.notes), default=0)
    notes = [
        TlpNote(
            pos=float(n.tick_on),
            dur=float(n.tick_off - n.tick_on),
            pitch=n.key,
            lyric=n.lyric,
            properties=TlpNoteProperties(phoneme=n.phoneme) if n.phoneme is not None else None,
        )
        for n in track.notes
    ]
    part = TlpPart(name=track.name, pos=0.0, dur=float(end), notes=notes)
    return TlpTrack(name=track.name, parts=[part])


def materialize(project: Project) -> TlpDocument:
    return TlpDocument(
        version=EXPORT_VERSION,
        tempos=[TlpTempo(pos=float(t.tick_position * TICK_RATE), bpm=t.bpm) for t in project.tempos],
        time_signatures=[
            TlpTimeSignature(bar_index=ts.measure_position, numerator=ts.numerator, denominator=ts.denominator)
            for ts in project.time_signatures
        ],
        tracks=[_materialize_track(t) for t in project.tracks],
    )


def export_notifications(project: Project, features: Iterable[Feature]) -> List[ExportNotification]:
    notifications: List[ExportNotification] = []
    if not project.has_xsampa_data:
        notifications.append(ExportNotification.phoneme_reset_required)
    if Feature.convert_pitch in list(features):
        notifications.append(ExportNotification.pitch_data_exported)
    return notifications


def generate(project: Project, features: Iterable[Feature] = ()) -> ExportResult:
    features = list(features)
    document = materialize(project)
    content = document.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    notifications = export_notifications(project, features)

    logger.info(
        "Exported %r: %d tracks, %d bytes, notifications=%s",
        project.name,
        len(document.tracks),
        len(content),
        [n.value for n in notifications],
    )
    return ExportResult(
        content=content,
        media_type=MEDIA_TYPE,
        file_name=FORMAT.file_name(project.name),
        notifications=notifications,
    )
