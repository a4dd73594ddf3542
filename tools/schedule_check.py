from __future__ import annotations

"""
Schedule check script.

Uses:
- fastcal.core.schedule.compute_range_schedule
- fastcal.core.timeutil.format_local_time
"""

import argparse

from fastcal.core.config import HighLatitudeMode
from fastcal.core.result import NoSolution
from fastcal.core.schedule import compute_range_schedule
from fastcal.core.timeutil import format_local_time, iter_days

from tools.common import add_common_args, config_from_args, resolve_date_range, dump_json


def main() -> None:
    parser = argparse.ArgumentParser(description="Dawn / sunrise / transit / sunset check")
    add_common_args(parser)
    parser.add_argument("--dawn-angle", type=float, default=18.0)
    parser.add_argument("--margin", type=float, default=0.0)
    parser.add_argument("--delay", type=float, default=0.0)
    parser.add_argument(
        "--high-latitude-mode",
        default=HighLatitudeMode.NONE.value,
        choices=[m.value for m in HighLatitudeMode],
    )
    args = parser.parse_args()

    start, end = resolve_date_range(args)
    if start is None or end is None:
        parser.error("--date or --start/--end required")

    cfg = config_from_args(
        args,
        dawn_twilight_angle=args.dawn_angle,
        dawn_margin_minutes=args.margin,
        dusk_delay_minutes=args.delay,
        high_latitude_mode=HighLatitudeMode.parse(args.high_latitude_mode),
    )
    tz = args.tz_offset

    rows = []
    for d, s in zip(iter_days(start, end), compute_range_schedule(start, end, cfg)):
        if isinstance(s, NoSolution):
            if args.json:
                rows.append({"date": d.isoformat(), "solved": False, "reason": s.reason})
            else:
                print(f"{d.isoformat()}  -- no solution ({s.reason})")
            continue

        hm = {
            "dawn_start": format_local_time(s.dawn_start, tz),
            "dawn": format_local_time(s.dawn, tz),
            "sunrise": format_local_time(s.sunrise, tz),
            "transit": format_local_time(s.solar_transit, tz),
            "sunset": format_local_time(s.dusk_raw, tz),
            "dusk": format_local_time(s.dusk, tz),
        }
        if args.json:
            rows.append(
                {
                    "date": d.isoformat(),
                    "solved": True,
                    "times": hm,
                    "duration_minutes": s.duration_minutes,
                    "fallback": s.high_latitude_fallback_applied,
                }
            )
        elif args.verbose:
            flag = " (fallback)" if s.high_latitude_fallback_applied else ""
            print(
                f"{d.isoformat()}  start={hm['dawn_start']} dawn={hm['dawn']} sunrise={hm['sunrise']} "
                f"transit={hm['transit']} sunset={hm['sunset']} dusk={hm['dusk']} "
                f"duration={s.duration_minutes}m{flag}"
            )
        else:
            print(f"{d.isoformat()}  {hm['dawn']}  {hm['dusk']}")

    if args.json:
        dump_json({"rows": rows})


if __name__ == "__main__":
    main()
