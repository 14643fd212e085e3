from __future__ import annotations

import argparse
import random
from typing import List

import polycal
from polycal.engines.fields import rules_for


def parse_variants(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]


def roundtrip_test(variant: str, N: int, seed: int, *, max_failures: int) -> int:
    """epoch-day -> date -> epoch-day, plus year/month/day re-creation, on random days."""
    rng = random.Random(seed)
    cal = polycal.calendar(variant)
    r = rules_for(cal)
    failures = 0

    for _ in range(N):
        e = rng.randint(cal.min_epoch_day, cal.max_epoch_day)
        d = cal.from_epoch_day(e)
        back = cal.to_epoch_day(d)
        again = cal.create(cal.year_of(d), d.month, d.day)
        doy = r.day_of_year.get_int(d)
        if back != e or again != d or r.day_of_year.with_int(d, doy) != d:
            failures += 1
            print("\nFAIL")
            print("calendar:", variant)
            print("epoch-day:", e, "->", d, "->", back)
            print("re-created:", again, " day-of-year:", doy)
            if failures >= max_failures:
                return failures

    return failures


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Random round-trip tests: epoch-day -> calendar date -> epoch-day.")
    p.add_argument("--calendars", type=str, default="", help="Comma-separated variants (default: all).")
    p.add_argument("--N", type=int, default=2000, help="Trials per calendar.")
    p.add_argument("--seed", type=int, default=123, help="RNG seed.")
    p.add_argument("--max-failures", type=int, default=5, help="Stop after this many failures per calendar.")
    args = p.parse_args(argv)

    variants = parse_variants(args.calendars) if args.calendars else polycal.list_calendars()
    total = 0
    for v in variants:
        f = roundtrip_test(v, args.N, args.seed, max_failures=args.max_failures)
        print(f"{v:28s} {'ok' if f == 0 else f'{f} failures'}")
        total += f
    return 1 if total else 0


if __name__ == "__main__":
    raise SystemExit(main())
