"""Recovery of prep session arrays from malformed LLM JSON.

Strategies run in a fixed order and the first one that yields an array wins.
Later strategies discard more trailing data than earlier ones.
"""

import json
import logging
import re

from fuelrx.errors import JsonRepairExhaustedError

_logger = logging.getLogger(__name__)

RAW_RESPONSE_LIMIT = 50_000
_MIN_ERROR_POSITION = 100

# A cooking time/temperature string closed with "]" where "}" was meant.
_BRACKET_MISMATCH_RE = re.compile(
    r'("(?:prep_time|cook_time|total_time|stovetop|oven|internal_temp)":\s*"[^"]*")'
    r"\s*\n(\s*)\]"
)
_SESSION_END_RE = re.compile(r'"display_order"\s*:\s*\d+\s*\}')
_LAST_SESSION_END_RE = re.compile(r'"display_order":\s*\d+\s*\}')

SessionList = list[dict[str, object]]


def _loads_array(text: str) -> SessionList | None:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return None
    if isinstance(parsed, list):
        return parsed
    return None


def _close_array(text: str, end: int) -> str:
    return text[:end] + "\n]"


def parse_direct(text: str) -> SessionList | None:
    """Parse the text as-is."""
    return _loads_array(text)


def fix_bracket_mismatch(text: str) -> str:
    """Replace a stray ``]`` after a trailing time/temperature field with ``}``."""
    return _BRACKET_MISMATCH_RE.sub(r"\1\n\2}", text)


def repair_bracket_mismatch(text: str) -> SessionList | None:
    """Parse after fixing bracket mismatches, if any were found."""
    repaired = fix_bracket_mismatch(text)
    if repaired == text:
        return None
    return _loads_array(repaired)


def extract_by_session_boundaries(text: str) -> SessionList | None:
    """Return the longest prefix that closes cleanly after a complete session."""
    sessions: SessionList | None = None
    for match in _SESSION_END_RE.finditer(text):
        parsed = _loads_array(_close_array(text, match.end()))
        if parsed:
            sessions = parsed
    return sessions


def truncate_before_error(text: str, error_position: int | None) -> SessionList | None:
    """Truncate at the last ``},`` preceding the parse error offset."""
    if error_position is None or error_position <= _MIN_ERROR_POSITION:
        return None
    last_session_end = text.rfind("},", 0, error_position)
    if last_session_end <= 0:
        return None
    return _loads_array(_close_array(text, last_session_end + 1))


def truncate_at_last_session(text: str) -> SessionList | None:
    """Truncate right after the last complete ``display_order`` entry."""
    last_end = None
    for match in _LAST_SESSION_END_RE.finditer(text):
        last_end = match.end()
    if last_end is None:
        return None
    return _loads_array(_close_array(text, last_end))


def repair_prep_sessions(raw: str) -> SessionList:
    """Recover an array of prep session objects from LLM output.

    Raises:
        JsonRepairExhaustedError: every strategy failed. The exception carries
            the first 50,000 characters of the text for server-side logs.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        error_position: int | None = exc.pos
        _logger.warning(
            "Prep sessions JSON parse failed (length=%s, position=%s): %s",
            len(raw),
            exc.pos,
            exc.msg,
        )
    else:
        if isinstance(parsed, list):
            return parsed
        error_position = None
        _logger.warning(
            "Prep sessions JSON is a %s, not an array", type(parsed).__name__
        )

    result = repair_bracket_mismatch(raw)
    if result is not None:
        _logger.info("Bracket repair recovered %s sessions", len(result))
        return result
    text = fix_bracket_mismatch(raw)

    result = extract_by_session_boundaries(text)
    if result:
        _logger.info("Boundary search recovered %s sessions", len(result))
        return result

    result = truncate_before_error(text, error_position)
    if result is not None:
        _logger.info(
            "Truncation before position %s recovered %s sessions",
            error_position,
            len(result),
        )
        return result

    result = truncate_at_last_session(text)
    if result is not None:
        _logger.info("Truncation at last session recovered %s sessions", len(result))
        return result

    _logger.error(
        "All prep session repair strategies failed (length=%s, position=%s)",
        len(text),
        error_position,
    )
    raise JsonRepairExhaustedError(
        "prep_sessions was a string but not valid JSON",
        raw_response=text[:RAW_RESPONSE_LIMIT],
        error_position=error_position,
    )
