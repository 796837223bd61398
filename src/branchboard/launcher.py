"""Launcher for `python -m branchboard` or external callers."""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from config import settings


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="branchboard", description="Branch manager dashboard")
    p.add_argument("--branch-id", required=True, help="Branch whose dashboard is shown")
    p.add_argument("--layout-dir", default=settings.LAYOUT_DIR, help="Saved layout directory")
    p.add_argument("--api-url", default=None, help="Dashboard API base URL")
    p.add_argument(
        "--period", default=settings.DEFAULT_PERIOD, choices=["WEEKLY", "MONTHLY", "YEARLY"]
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:  # pragma: no cover - runtime
    args = build_parser().parse_args(argv)
    from .app.bootstrap import create_app
    from .views.dashboard_view import DashboardView

    ctx = create_app(
        layout_dir=args.layout_dir,
        api_url=args.api_url,
        log_level=logging.DEBUG if args.verbose else logging.INFO,
    )
    view = DashboardView(
        ctx.layout_service_for(args.branch_id),
        ctx.data_service,
        period=args.period,
        event_bus=ctx.event_bus,
    )
    view.setWindowTitle(f"Branch Dashboard - {args.branch_id}")
    view.resize(1280, 800)
    view.show()
    view.refresh()
    try:
        return ctx.qt_app.exec()
    finally:
        ctx.shutdown()
