from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from tlpcore.config import get_settings


# =========================
# Enums
# =========================
class Format(str, Enum):
    tlp = "tlp"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    def file_name(self, name: str) -> str:
        return f"{name}{self.extension}"


class ImportWarning(str, Enum):
    time_signature_not_found = "TimeSignatureNotFound"
    tempo_not_found = "TempoNotFound"
    pitch_data_not_converted = "PitchDataNotConverted"
    corrupt_fragment_skipped = "CorruptFragmentSkipped"


class ExportNotification(str, Enum):
    phoneme_reset_required = "PhonemeResetRequired"
    pitch_data_exported = "PitchDataExported"


class Feature(str, Enum):
    convert_pitch = "ConvertPitch"


# =========================
# Canonical project
# =========================
class TimeSignature(BaseModel):
    measure_position: int = 0
    numerator: int
    denominator: int

    @classmethod
    def default(cls) -> "TimeSignature":
        return cls(measure_position=0, numerator=4, denominator=4)


class Tempo(BaseModel):
    tick_position: int = 0
    bpm: float

    @classmethod
    def default(cls) -> "Tempo":
        return cls(tick_position=0, bpm=120.0)


class Note(BaseModel):
    """
    Canonical note. Ticks are absolute (480 per quarter note).
    phoneme=None lets the target engine pick its own default.
    """
    id: int
    key: int
    lyric: str
    tick_on: int
    tick_off: int
    phoneme: Optional[str] = None

    @property
    def length(self) -> int:
        return self.tick_off - self.tick_on


class Pitch(BaseModel):
    # (tick, value); value None marks a gap in the curve
    data: List[Tuple[int, Optional[float]]] = Field(default_factory=list)
    is_absolute: bool = False


class Track(BaseModel):
    id: int
    name: str = "Track"
    notes: List[Note] = Field(default_factory=list)
    pitch: Optional[Pitch] = None


class Project(BaseModel):
    format: Format
    input_files: List[Path] = Field(default_factory=list)
    name: str
    tracks: List[Track] = Field(default_factory=list)
    time_signatures: List[TimeSignature] = Field(default_factory=list)
    tempos: List[Tempo] = Field(default_factory=list)
    measure_prefix: int = 0
    import_warnings: List[ImportWarning] = Field(default_factory=list)

    @property
    def has_xsampa_data(self) -> bool:
        return any(note.phoneme is not None for track in self.tracks for note in track.notes)


# =========================
# Call parameters / results
# =========================
def _default_lyric() -> str:
    return get_settings().default_lyric


class ImportParams(BaseModel):
    default_lyric: str = Field(default_factory=_default_lyric, min_length=1)

    @field_validator("default_lyric")
    @classmethod
    def _blank_lyric_uses_default(cls, value: str) -> str:
        # a whitespace-only lyric would leave notes blank
        if not value.strip():
            return _default_lyric()
        return value


class ExportResult(BaseModel):
    content: bytes
    media_type: str = "application/octet-stream"
    file_name: str
    notifications: List[ExportNotification] = Field(default_factory=list)
