"""Config loading: read, normalize, stage, parse, bind.

A ``ConfigLoader`` is built once by the application's startup code and passed
to whatever needs configuration. Each ``load`` call is self-contained: the
parsed tree is replaced only when every step succeeded.
"""

from __future__ import annotations

import copy
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, Optional, Type, TypeVar

from .binding import bind
from .errors import ConfigLoadError, ParseError, ReadError, StagingError
from .log import get_logger
from .models import LoaderOptions
from .normalize import CharsetNormalizerSniffer, CharsetSniffer, normalize
from .parsers import is_supported, parse_file
from .rules import ARTIFACT_PREFIX, SUPPORTED_SUFFIXES

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = object()


@contextmanager
def staged_artifact(data: bytes, suffix: str, directory: Path, keep: bool = False) -> Iterator[Path]:
    """Write ``data`` to a temporary file and yield its path.

    The file is removed when the block exits, whatever the outcome, unless
    ``keep`` is set.

    Raises:
        StagingError: If the file cannot be created, written or closed.
    """
    try:
        directory.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(prefix=ARTIFACT_PREFIX, suffix=suffix, dir=directory)
    except OSError as e:
        raise StagingError(f"Failed to create temp file in {directory}: {e}") from e

    path = Path(name)
    try:
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except OSError as e:
            raise StagingError(f"Failed to write temp file {path}: {e}") from e
        logger.debug(f"Staged {len(data)} bytes at {path}")
        yield path
    finally:
        if not keep:
            path.unlink(missing_ok=True)


def _normalize_suffix(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


class ConfigLoader:
    """Loads configuration files of any encoding into a parsed key/value tree.

    Args:
        options: Loader options; defaults to ``LoaderOptions()``.
        temp_directory: Overrides ``options.temp_directory``.
        keep_temp_artifact: Overrides ``options.keep_temp_artifact``.
        sniffer: Charset sniffer used for non-UTF-8 input.
    """

    def __init__(
        self,
        options: Optional[LoaderOptions] = None,
        *,
        temp_directory: Optional[str | Path] = None,
        keep_temp_artifact: Optional[bool] = None,
        sniffer: Optional[CharsetSniffer] = None,
    ):
        values = (options or LoaderOptions()).model_dump()
        if temp_directory is not None:
            values["temp_directory"] = temp_directory
        if keep_temp_artifact is not None:
            values["keep_temp_artifact"] = keep_temp_artifact
        self.options = LoaderOptions(**values)
        self.sniffer = sniffer or CharsetNormalizerSniffer()

        self.config_file: Optional[Path] = None
        self.artifact_path: Optional[Path] = None
        self._tree: Optional[Dict[str, Any]] = None

    def load(self, file_path: str | Path) -> None:
        """Load and parse the config file at ``file_path``.

        Raises:
            ReadError, EncodingConversionError, StagingError, ParseError
        """
        path = Path(file_path)
        logger.info(f"Loading config from: {path}")
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ReadError(f"Failed to read config file {path}: {e}") from e
        self._load(raw, path.suffix, source=path)

    def load_stream(self, stream: BinaryIO, ext: str) -> None:
        """Load config from a binary stream; ``ext`` names its format (e.g. ``".toml"``)."""
        try:
            raw = stream.read()
        except (OSError, ValueError) as e:
            raise ReadError(f"Failed to read config stream: {e}") from e
        if not isinstance(raw, (bytes, bytearray)):
            raise ReadError(f"Config stream must yield bytes, got {type(raw).__name__}")
        self._load(bytes(raw), ext)

    def load_bytes(self, data: bytes, ext: str) -> None:
        """Load config from an in-memory buffer; ``ext`` names its format."""
        self._load(bytes(data), ext)

    def _load(self, raw: bytes, ext: str, source: Optional[Path] = None) -> None:
        suffix = _normalize_suffix(ext)
        if not is_supported(suffix):
            raise ParseError(
                f"Unsupported config type: {suffix or '(none)'}. Supported: {', '.join(SUPPORTED_SUFFIXES)}"
            )

        data = normalize(raw, sniffer=self.sniffer)

        keep = self.options.keep_temp_artifact
        with staged_artifact(data, suffix, self.options.staging_dir(), keep=keep) as artifact:
            try:
                tree = parse_file(artifact)
            except ReadError as e:
                raise StagingError(f"Staged artifact {artifact} could not be read back: {e}") from e

        self._tree = tree
        self.config_file = source
        self.artifact_path = artifact if keep else None
        if keep:
            logger.debug(f"Kept staged artifact: {artifact}")
        logger.info(f"Config loaded: {len(tree)} top-level keys")

    def _require_tree(self) -> Dict[str, Any]:
        if self._tree is None:
            raise ConfigLoadError("No config loaded; call load() first")
        return self._tree

    def unmarshal(self, target: Type[T]) -> T:
        """Bind the loaded config onto ``target`` and return the instance.

        Raises:
            BindError: If the config does not fit ``target``.
        """
        return bind(self._require_tree(), target)

    def settings(self) -> Dict[str, Any]:
        return copy.deepcopy(self._require_tree())

    def _lookup(self, key: str) -> Any:
        node: Any = self._require_tree()
        for part in key.lower().split("."):
            if not isinstance(node, dict) or part not in node:
                return _MISSING
            node = node[part]
        return node

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value at dotted ``key`` (case-insensitive), or ``default``."""
        value = self._lookup(key)
        if value is _MISSING:
            return default
        return copy.deepcopy(value)

    def is_set(self, key: str) -> bool:
        return self._lookup(key) is not _MISSING
