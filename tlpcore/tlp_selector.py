"""
Snapshot selection for .tlp files.

TuneLab appends a new JSON snapshot on every save, separated by NUL:

    document ("\\u0000" document)*

The authoritative snapshot is the one with the highest `version`.
"""
from __future__ import annotations

import json
import logging
from typing import List, Optional, Sequence

from pydantic import ValidationError

from tlpcore.models import ImportWarning
from tlpcore.tlp_schema import TlpDocument, bind_document

logger = logging.getLogger(__name__)

SEPARATOR = "\u0000"


class TlpDecodeError(ValueError):
    """The file holds no usable snapshot."""


def split_fragments(text: str) -> List[str]:
    fragments = (f.strip(SEPARATOR).strip() for f in text.split(SEPARATOR))
    return [f for f in fragments if f]


def parse_fragment(fragment: str) -> TlpDocument:
    try:
        raw = json.loads(fragment)
    except json.JSONDecodeError as e:
        raise TlpDecodeError(f"Snapshot is not valid JSON: {e}") from e
    try:
        return bind_document(raw)
    except ValidationError as e:
        raise TlpDecodeError(f"Snapshot does not match the TLP schema: {e}") from e


def select_latest(documents: Sequence[TlpDocument]) -> TlpDocument:
    """Highest version wins; on a tie the last occurrence wins."""
    if not documents:
        raise TlpDecodeError("No snapshot to select from")
    latest = documents[0]
    for doc in documents[1:]:
        if doc.version >= latest.version:
            latest = doc
    return latest


def decode_documents(
    text: str,
    *,
    skip_corrupt: bool = False,
    warnings: Optional[List[ImportWarning]] = None,
) -> List[TlpDocument]:
    """
    Parse every snapshot of a .tlp file.

    - skip_corrupt=False: the first corrupt snapshot fails the decode
    - skip_corrupt=True: corrupt snapshots are skipped; each skip appends
      CorruptFragmentSkipped to `warnings`. Fails only if nothing parses.
    """
    fragments = split_fragments(text)
    if not fragments:
        raise TlpDecodeError("File contains no TLP snapshot")

    documents: List[TlpDocument] = []
    for index, fragment in enumerate(fragments):
        try:
            documents.append(parse_fragment(fragment))
        except TlpDecodeError as e:
            if not skip_corrupt:
                raise
            logger.warning("Skipping corrupt snapshot #%d: %s", index, e)
            if warnings is not None:
                warnings.append(ImportWarning.corrupt_fragment_skipped)

    if not documents:
        raise TlpDecodeError(f"None of the {len(fragments)} snapshots could be parsed")
    return documents
