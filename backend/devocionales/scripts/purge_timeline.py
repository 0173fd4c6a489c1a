from __future__ import annotations

import argparse
from datetime import datetime, timedelta, timezone

from devocionales.core.settings import settings
from devocionales.db.session import SessionLocal
from devocionales.services.timeline import purge_events_before


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Delete timeline events past the retention window.")
    parser.add_argument(
        "--days",
        type=int,
        default=settings.timeline_retention_days,
        help="Keep events newer than this many days.",
    )
    parser.add_argument("--apply", action="store_true", help="Delete matching events.")
    return parser.parse_args(argv)


def run(session, *, days: int, apply: bool, now: datetime | None = None) -> int:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=days)
    count = purge_events_before(session, cutoff, apply=apply)
    print(f"Timeline events older than {cutoff.date().isoformat()}: {count}")
    if not apply:
        print("Dry run only. Use --apply to delete them.")
    return count


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.days < 1:
        print("--days must be at least 1")
        return 2
    session = SessionLocal()
    try:
        run(session, days=args.days, apply=args.apply)
        return 0
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
