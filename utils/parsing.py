"""
Parsing helpers
"""

import re

_DURATION_RE = re.compile(
    r'^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$'
)


def parse_duration(duration: str) -> str:
    """
    Turn an ISO-8601 duration into a short human readable string.

    Zero components are left out: ``PT1H30M`` -> ``1h 30m``, ``PT45S`` -> ``45s``.
    A duration with no non-zero component renders as ``0s``.

    Raises:
        ValueError: If ``duration`` is not an ISO-8601 duration
    """
    match = _DURATION_RE.match(duration.strip()) if isinstance(duration, str) else None
    if match is None or duration.strip() in ('P', 'PT') or duration.strip().endswith('T'):
        raise ValueError(f"Invalid ISO-8601 duration: {duration!r}")

    parts = []
    for unit, suffix in (('days', 'd'), ('hours', 'h'), ('minutes', 'm'), ('seconds', 's')):
        value = match.group(unit)
        if value is None:
            continue
        number = float(value) if unit == 'seconds' else int(value)
        if number:
            parts.append(f"{int(number) if float(number).is_integer() else number}{suffix}")

    return ' '.join(parts) or '0s'
