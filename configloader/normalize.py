"""
Encoding normalization for configuration bytes.

Responsibilities:
- byte-order mark detection + stripping
- UTF-8 detection
- charset sniffing + transcoding of everything else into UTF-8

Nothing here touches the filesystem or keeps state between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from charset_normalizer import from_bytes

from .errors import EncodingConversionError
from .log import get_logger
from .rules import (
    BOM_MIN_INPUT,
    BOM_SIGNATURES,
    MAX_CHAOS,
    TARGET_ENCODING,
    WESTERN_CHAOS_MARGIN,
    WESTERN_CODECS,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class Bom:
    signature: bytes
    codec: str


class CharsetSniffer(Protocol):
    """Guesses the charset of ``data`` from its content and returns it as UTF-8."""

    def guess_and_decode(self, data: bytes) -> bytes:
        ...


def detect_bom(data: bytes) -> Optional[Bom]:
    if len(data) < BOM_MIN_INPUT:
        return None
    for signature, codec in BOM_SIGNATURES:
        if data.startswith(signature):
            return Bom(signature=signature, codec=codec)
    return None


def strip_bom(data: bytes) -> bytes:
    """Return ``data`` without its leading byte-order mark, if it has one."""
    bom = detect_bom(data)
    if bom is None:
        return data
    return data[len(bom.signature):]


def is_utf8(data: bytes) -> bool:
    """
    Best-effort check that ``data`` is already UTF-8 text.

    Strict UTF-8 decoding must succeed and no NUL byte may appear: a wide
    encoding of ASCII text is valid UTF-8 byte-wise but is full of NULs.
    Legacy 8-bit text that happens to form valid UTF-8 sequences is accepted.
    """
    if b"\x00" in data:
        return False
    try:
        data.decode(TARGET_ENCODING)
    except UnicodeDecodeError:
        return False
    return True


class CharsetNormalizerSniffer:
    """Default sniffer backed by charset-normalizer.

    Guesses messier than ``max_chaos`` are discarded, so binary content ends
    up with no guess at all. Western codepages are preferred over lookalike
    codepages that charset-normalizer may rank first on short Latin text.
    """

    def __init__(self, max_chaos: float = MAX_CHAOS):
        self.max_chaos = max_chaos

    def _best_match(self, data: bytes):
        best = from_bytes(data, threshold=self.max_chaos).best()
        if best is None or best.encoding in WESTERN_CODECS:
            return best

        western = from_bytes(data, threshold=self.max_chaos, cp_isolation=list(WESTERN_CODECS)).best()
        if western is not None and western.chaos <= best.chaos + WESTERN_CHAOS_MARGIN:
            logger.debug(f"Preferring {western.encoding} over {best.encoding}")
            return western
        return best

    def guess_and_decode(self, data: bytes) -> bytes:
        match = self._best_match(data)
        if match is None:
            raise EncodingConversionError("no charset could be guessed from content", stage="sniff")

        guessed = match.encoding
        logger.debug(f"Charset guess: {guessed} (chaos {match.chaos:.3f})")

        try:
            text = data.decode(guessed)
        except (UnicodeDecodeError, LookupError) as e:
            raise EncodingConversionError(f"decoding as {guessed} failed: {e}", stage="decode") from e

        return text.encode(TARGET_ENCODING)


def transcode(
    data: bytes,
    sniffer: Optional[CharsetSniffer] = None,
    bom: Optional[Bom] = None,
) -> bytes:
    """
    Convert BOM-stripped, non-UTF-8 ``data`` into UTF-8.

    A UTF-16 byte-order mark seen before stripping names the codec outright;
    without one the sniffer guesses from content.
    """
    if bom is not None and bom.codec != TARGET_ENCODING:
        logger.debug(f"Decoding with codec signalled by BOM: {bom.codec}")
        try:
            return data.decode(bom.codec).encode(TARGET_ENCODING)
        except UnicodeDecodeError as e:
            raise EncodingConversionError(f"decoding as {bom.codec} failed: {e}", stage="decode") from e

    if sniffer is None:
        sniffer = CharsetNormalizerSniffer()
    return sniffer.guess_and_decode(data)


def normalize(raw: bytes, sniffer: Optional[CharsetSniffer] = None) -> bytes:
    """
    Normalize ``raw`` into UTF-8 bytes without a leading BOM.

    Rules:
    - Strip a recognized BOM.
    - A UTF-16 BOM decides the codec; the UTF-8 check is skipped.
    - Already UTF-8: return the stripped bytes as they are.
    - Otherwise transcode; failures surface as EncodingConversionError, never retried.
    """
    bom = detect_bom(raw)
    stripped = raw if bom is None else raw[len(bom.signature):]
    if bom is not None:
        logger.debug(f"Stripped {bom.codec} byte-order mark")

    wide = bom is not None and bom.codec != TARGET_ENCODING
    if not wide and is_utf8(stripped):
        return stripped

    try:
        return transcode(stripped, sniffer=sniffer, bom=bom)
    except EncodingConversionError as e:
        raise EncodingConversionError(f"encoding conversion failed at {e.stage} stage: {e}", stage=e.stage) from e
