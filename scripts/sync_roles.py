"""Compare roles in the identity provider with the Users table.

    python scripts/sync_roles.py                    # report only
    python scripts/sync_roles.py --fix              # push database roles to the provider
    python scripts/sync_roles.py --fix --provider   # pull provider roles into the database
"""
from __future__ import annotations

import argparse
import importlib
import sys

from dotenv import load_dotenv

from student_portal.config import get_settings_module
from student_portal.container import build_container
from student_portal.core.logger import configure_logging


def _print_section(title: str, rows: list[dict]) -> None:
    if not rows:
        return
    print(f"\n{title} ({len(rows)}):")
    for row in rows:
        print("  " + ", ".join(f"{k}={v}" for k, v in row.items()))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--fix", action="store_true", help="repair the differences that were found")
    parser.add_argument(
        "--provider",
        action="store_true",
        help="treat the identity provider as the source of truth when fixing",
    )
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))
    container = build_container(db_config=dict(settings.DB_CONFIG), settings_module=settings)

    report = container.user_service.sync_roles(fix=args.fix, provider_is_source=args.provider)

    _print_section("Role mismatches", report.mismatches)
    _print_section("Only in identity provider", report.provider_only)
    _print_section("Only in database", report.db_only)
    _print_section("Errors", report.errors)

    if report.issue_count == 0:
        print("OK: roles are in sync")
        return 0

    print(f"\nFound {report.issue_count} issue(s)")
    if args.fix:
        print(f"Fixed {report.fixed}, failed {len(report.errors)}")
        return 1 if report.errors else 0
    print("Run with --fix to repair")
    return 1


if __name__ == "__main__":
    sys.exit(main())
