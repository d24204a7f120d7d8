"""
On-disk shape of a TuneLab project snapshot (.tlp).

Lenient by construction: unknown keys are ignored and every field has a
default, so partially written or newer snapshots still bind.

Two schema eras exist:
- legacy: integer pos/dur, `automations` is an opaque blob
- current: float pos/dur, `automations` is a set of named curves

Everything downstream works on `TlpDocument` (current era). The only place
that looks at the era is `bind_document`.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

AUTOMATION_KEYS = (
    "pitchBend",
    "dynamics",
    "brightness",
    "gender",
    "growl",
    "clearness",
    "exciter",
    "breathiness",
    "air",
)


class SchemaEra(str, Enum):
    legacy = "legacy"
    current = "current"


class _TlpModel(BaseModel):
    # JSON keys are camelCase (barIndex, asRefer, pitchBend)
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


# =========================
# Current era
# =========================
class TlpTempo(_TlpModel):
    pos: float = 0.0
    bpm: float = 0.0


class TlpTimeSignature(_TlpModel):
    bar_index: int = 0
    numerator: int = 0
    denominator: int = 0


class TlpVoice(_TlpModel):
    type: str = "Unknown"
    id: str = ""


class TlpNoteProperties(_TlpModel):
    phoneme: Optional[str] = None


class TlpNote(_TlpModel):
    """pos/dur are relative to the enclosing part."""
    pos: float = 0.0
    dur: float = 0.0
    pitch: int = 0
    lyric: str = ""
    pronunciation: str = ""
    properties: Optional[TlpNoteProperties] = None


class TlpAutomationCurve(_TlpModel):
    default: float = 0.0
    values: List[float] = Field(default_factory=list)


class TlpAutomations(_TlpModel):
    pitch_bend: Optional[TlpAutomationCurve] = None
    dynamics: Optional[TlpAutomationCurve] = None
    brightness: Optional[TlpAutomationCurve] = None
    gender: Optional[TlpAutomationCurve] = None
    growl: Optional[TlpAutomationCurve] = None
    clearness: Optional[TlpAutomationCurve] = None
    exciter: Optional[TlpAutomationCurve] = None
    breathiness: Optional[TlpAutomationCurve] = None
    air: Optional[TlpAutomationCurve] = None

    def curves(self) -> Dict[str, TlpAutomationCurve]:
        """Present curves keyed by their JSON name."""
        return {
            to_camel(name): curve
            for name, curve in ((n, getattr(self, n)) for n in type(self).model_fields)
            if curve is not None
        }


class TlpPart(_TlpModel):
    name: str = "Unknown"
    pos: float = 0.0
    dur: float = 0.0
    type: str = "midi"
    voice: Optional[TlpVoice] = None
    properties: Optional[Dict[str, Any]] = None
    notes: List[TlpNote] = Field(default_factory=list)
    automations: Optional[TlpAutomations] = None
    pitch: Any = None
    vibratos: Any = None

    def has_pitch_data(self) -> bool:
        if self.pitch:
            return True
        bend = self.automations.pitch_bend if self.automations else None
        return bool(bend and bend.values)


class TlpTrack(_TlpModel):
    name: str = "Unknown"
    gain: float = 0.0
    pan: float = 0.0
    mute: bool = False
    solo: bool = False
    color: str = "#737CE5"
    as_refer: bool = True
    parts: List[TlpPart] = Field(default_factory=list)


class TlpDocument(_TlpModel):
    version: int = 0
    tempos: List[TlpTempo] = Field(default_factory=list)
    time_signatures: List[TlpTimeSignature] = Field(default_factory=list)
    tracks: List[TlpTrack] = Field(default_factory=list)


# =========================
# Legacy era (integer ticks, opaque automation)
# =========================
class LegacyTlpTempo(TlpTempo):
    pos: int = 0


class LegacyTlpNote(TlpNote):
    pos: int = 0
    dur: int = 0


class LegacyTlpPart(TlpPart):
    pos: int = 0
    dur: int = 0
    notes: List[LegacyTlpNote] = Field(default_factory=list)
    automations: Any = None


class LegacyTlpTrack(TlpTrack):
    parts: List[LegacyTlpPart] = Field(default_factory=list)


class LegacyTlpDocument(TlpDocument):
    tempos: List[LegacyTlpTempo] = Field(default_factory=list)
    tracks: List[LegacyTlpTrack] = Field(default_factory=list)

    def upgrade(self) -> TlpDocument:
        """Convert to the current era. Opaque automation blobs are not interpreted."""
        raw = self.model_dump(by_alias=True)
        for track in raw["tracks"]:
            for part in track["parts"]:
                if part.pop("automations", None) is not None:
                    logger.debug("Dropping opaque automation blob of part %r", part.get("name"))
        return TlpDocument.model_validate(raw)


# =========================
# Era selection
# =========================
def _dicts(value: Any) -> Iterator[Dict[str, Any]]:
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                yield item


def _parts(raw: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    for track in _dicts(raw.get("tracks")):
        yield from _dicts(track.get("parts"))


def _tick_values(raw: Dict[str, Any]) -> Iterator[Any]:
    for tempo in _dicts(raw.get("tempos")):
        yield tempo.get("pos")
    for part in _parts(raw):
        yield part.get("pos")
        yield part.get("dur")
        for note in _dicts(part.get("notes")):
            yield note.get("pos")
            yield note.get("dur")


def _is_curve(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    try:
        TlpAutomationCurve.model_validate(value)
    except ValidationError:
        return False
    return True


def _has_structured_automation(part: Dict[str, Any]) -> bool:
    # every known key present must hold a valid curve; anything else is an opaque blob
    automations = part.get("automations")
    if not isinstance(automations, dict):
        return False
    present = [automations[key] for key in AUTOMATION_KEYS if automations.get(key) is not None]
    return bool(present) and all(_is_curve(value) for value in present)


def detect_era(raw: Any) -> SchemaEra:
    """
    current: any tick field is a JSON float, or any part has named curves
    legacy: everything else (integer ticks, opaque or missing automation)
    """
    if not isinstance(raw, dict):
        return SchemaEra.current
    if any(isinstance(v, float) for v in _tick_values(raw)):
        return SchemaEra.current
    if any(_has_structured_automation(part) for part in _parts(raw)):
        return SchemaEra.current
    return SchemaEra.legacy


def bind_document(raw: Any) -> TlpDocument:
    """
    Bind one decoded JSON value to the schema of its era and converge on
    `TlpDocument`. Raises pydantic.ValidationError when the value does not fit.
    """
    if detect_era(raw) == SchemaEra.legacy:
        return LegacyTlpDocument.model_validate(raw).upgrade()
    return TlpDocument.model_validate(raw)
