"""
Deterministic normalization rules.

This file exists to make the encoding decisions explicit and enforceable.
"""

TARGET_ENCODING = "utf-8"

# Order matters: the 3-byte UTF-8 signature is checked before the 2-byte UTF-16 ones.
BOM_SIGNATURES = (
    (b"\xef\xbb\xbf", "utf-8"),
    (b"\xfe\xff", "utf-16-be"),
    (b"\xff\xfe", "utf-16-le"),
)

# Shortest input that can carry a recognized signature.
BOM_MIN_INPUT = 3

# Highest charset-normalizer chaos (mess ratio) a guess may carry; above it the content is binary.
MAX_CHAOS = 0.1

# Western codepages win over lookalikes (mac_latin2, cp775, ...) when no messier by this margin.
WESTERN_CODECS = ("cp1252", "latin_1", "iso8859_15")
WESTERN_CHAOS_MARGIN = 0.02

ARTIFACT_PREFIX = "config-"

SUPPORTED_SUFFIXES = (".json", ".toml", ".yaml", ".yml", ".ini", ".cfg")
