"""Named constants — eliminates magic strings across the codebase."""

from __future__ import annotations

UNIT_KIND_MODULE = "module"
UNIT_KIND_SCRIPT = "script"

MAIN_SCRIPT_NAME = "main"

FORMAT_TEXT = "text"
FORMAT_JSON = "json"
OUTPUT_FORMATS: tuple[str, ...] = (FORMAT_TEXT, FORMAT_JSON)

SERIALIZED_UNIT_ENCODING = "utf-8"

VERIFY_TIME_LABEL = "Milliseconds to verify compiled units"
