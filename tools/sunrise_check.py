from __future__ import annotations

"""
Sunrise/sunset cross-check: low-precision formulas vs. Skyfield + JPL ephemeris.

Uses:
- fastcal.core.events.sunrise / sunset
- fastcal.core.providers.skyfield_provider.SkyfieldProvider
"""

import argparse
from datetime import datetime
from typing import Optional

from fastcal.core import events
from fastcal.core.providers.skyfield_provider import SkyfieldProvider
from fastcal.core.result import NoSolution
from fastcal.core.timeutil import format_local_time, iter_days, local_noon_utc

from tools.common import (
    add_common_args,
    add_ephemeris_args,
    config_from_args,
    resolve_date_range,
    resolve_ephemeris,
    dump_json,
    skip,
)


def _diff_minutes(a, b: Optional[datetime]) -> Optional[float]:
    if isinstance(a, NoSolution) or b is None:
        return None
    return round((a - b).total_seconds() / 60.0, 2)


def main() -> None:
    parser = argparse.ArgumentParser(description="Sunrise/sunset check against Skyfield")
    add_common_args(parser)
    add_ephemeris_args(parser)
    parser.add_argument("--max-diff", type=float, default=2.0, help="minutes")
    args = parser.parse_args()

    start, end = resolve_date_range(args)
    if start is None or end is None:
        parser.error("--date or --start/--end required")

    eph = resolve_ephemeris(args.ephemeris, args.ephemeris_path)
    if eph.skip_reason:
        skip(eph.skip_reason)

    provider = SkyfieldProvider(ephemeris_path=eph.path)
    cfg = config_from_args(args)
    loc, tz = cfg.location, cfg.timezone_offset_minutes

    rows = []
    worst = 0.0
    for d in iter_days(start, end):
        noon = local_noon_utc(d, tz)
        sr = events.sunrise(noon, loc, tz)
        ss = events.sunset(noon, loc, tz)
        ref_sr, ref_ss = provider.sunrise_sunset_utc_for_date(d, tz, latitude=loc.latitude, longitude=loc.longitude)

        d_sr = _diff_minutes(sr, ref_sr)
        d_ss = _diff_minutes(ss, ref_ss)
        for x in (d_sr, d_ss):
            if x is not None:
                worst = max(worst, abs(x))

        if args.json:
            rows.append({"date": d.isoformat(), "sunrise_diff_min": d_sr, "sunset_diff_min": d_ss})
        else:
            sr_s = "--:--" if isinstance(sr, NoSolution) else format_local_time(sr, tz)
            ss_s = "--:--" if isinstance(ss, NoSolution) else format_local_time(ss, tz)
            line = f"{d.isoformat()}  sunrise={sr_s} ({d_sr})  sunset={ss_s} ({d_ss})"
            if args.verbose and ref_sr is not None and ref_ss is not None:
                line += f"  ref={format_local_time(ref_sr, tz)}/{format_local_time(ref_ss, tz)}"
            print(line)

    if args.json:
        dump_json({"rows": rows, "worst_abs_diff_min": worst})
    else:
        print(f"worst |diff| = {worst:.2f} min (limit {args.max_diff:g})")

    if worst > args.max_diff:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
