"""CLI: пользователи, отчеты по фиду и запуск API."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from functools import partial
from pathlib import Path
from typing import Optional, Sequence

from adsboard.config import get_settings
from adsboard.ingestion import FeedClient, FeedError, load_feed_file
from adsboard.services import DateRange, ExportFormat, SortDirection, SortState
from adsboard.services.dashboard import DashboardState
from adsboard.services.export import export_detail, export_summary
from adsboard.services.formatting import cost_metric_label, format_currency, format_date, format_number, format_percent
from adsboard.services.pagination import DEFAULT_ROWS_PER_PAGE, ROWS_PER_PAGE_CHOICES
from adsboard.services.sorting import DETAIL_SORT_KEYS, SUMMARY_SORT_KEYS

logger = logging.getLogger(__name__)


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Ожидается дата YYYY-MM-DD: {value}")


def _date_range(value: str) -> DateRange:
    try:
        return DateRange.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Отчеты по рекламному фиду")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("init-db", help="Создать таблицы")

    create_user = commands.add_parser("create-user", help="Добавить пользователя")
    create_user.add_argument("--username", required=True)
    create_user.add_argument("--password", required=True)

    report = commands.add_parser("report", help="Построить отчет по фиду")
    source = report.add_mutually_exclusive_group()
    source.add_argument("--feed-url", help="Адрес фида (по умолчанию DATA_URL)")
    source.add_argument("--feed-file", help="JSON-файл с выгрузкой фида")
    report.add_argument("--campaign", default="", help="Подстрока в названии кампании")
    report.add_argument("--ads-name", default="", help="Подстрока в названии объявления")
    report.add_argument("--platform", default="All")
    report.add_argument("--objective", default="All")
    report.add_argument("--date-range", type=_date_range, default=DateRange.ALL)
    report.add_argument("--start", type=_iso_date, help="Начало периода для Custom")
    report.add_argument("--end", type=_iso_date, help="Конец периода для Custom")
    report.add_argument("--sort-key")
    report.add_argument("--descending", action="store_true")
    report.add_argument("--view", choices=["detail", "summary", "totals"], default="totals")
    report.add_argument("--page", type=int, default=0)
    report.add_argument(
        "--rows-per-page", type=int, choices=ROWS_PER_PAGE_CHOICES, default=DEFAULT_ROWS_PER_PAGE
    )
    report.add_argument("--export", dest="export_path", help="Файл для выгрузки detail/summary")
    report.add_argument("--format", choices=["csv", "excel"], default="csv")

    serve = commands.add_parser("serve", help="Запустить HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser


def _print_totals(state: DashboardState) -> None:
    totals = state.totals()
    print(f"Impressions: {format_number(totals.impressions)}")
    print(f"Clicks:      {format_number(totals.clicks)}")
    print(f"Installs:    {format_number(totals.installs)}")
    print(f"Engagement:  {format_number(totals.engagement)}")
    print(f"Spent:       {format_currency(totals.spent)}")
    print(f"Budget:      {format_currency(totals.budget)}")
    print(f"CTR:         {format_percent(totals.ctr)}")
    print(f"CPM: {format_currency(totals.cpm)}  CPC: {format_currency(totals.cpc)}  "
          f"CPI: {format_currency(totals.cpi)}  CPE: {format_currency(totals.cpe)}")


def _print_detail(state: DashboardState) -> None:
    page = state.detail_page()
    for row in page.items:
        print(
            f"{format_date(row.date)}\t{row.campaign}\t{row.ad_name}\t{row.platform}\t"
            f"{format_number(row.impressions)}\t{format_number(row.clicks)}\t{format_percent(row.ctr)}\t"
            f"{cost_metric_label(row.objective, row.cost_metric)}"
        )
    print(f"Showing {page.start_index}-{page.end_index} of {page.total} results")


def _print_summary(state: DashboardState) -> None:
    for group in state.grouped():
        print(
            f"{group.campaign}\t{format_number(group.impressions)}\t{format_number(group.clicks)}\t"
            f"{format_percent(group.ctr)}\t{format_currency(group.spent)}"
        )


def run_report(args: argparse.Namespace) -> int:
    if args.page < 0:
        print("--page должен быть >= 0", file=sys.stderr)
        return 2

    allowed_keys = SUMMARY_SORT_KEYS if args.view == "summary" else DETAIL_SORT_KEYS
    if args.sort_key and args.sort_key not in allowed_keys:
        print(
            f"Нельзя сортировать {args.view} по {args.sort_key}; доступно: {', '.join(sorted(allowed_keys))}",
            file=sys.stderr,
        )
        return 2

    if args.feed_file:
        fetch = partial(load_feed_file, args.feed_file)
    else:
        settings = get_settings()
        client = FeedClient(args.feed_url or settings.data_url, timeout=settings.feed_timeout_seconds)
        fetch = client.fetch

    state = DashboardState()
    try:
        state.load(fetch)
    except FeedError:
        print(state.error, file=sys.stderr)
        return 1
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 1

    state.set_criteria(
        campaign=args.campaign,
        ad_name=args.ads_name,
        platform=args.platform,
        objective=args.objective,
        date_range=args.date_range,
        custom_start=args.start,
        custom_end=args.end,
    )
    if args.sort_key:
        direction = SortDirection.DESCENDING if args.descending else SortDirection.ASCENDING
        state.sort = SortState(args.sort_key, direction)
    state.set_rows_per_page(args.rows_per_page)
    state.page = args.page

    if args.export_path:
        fmt = ExportFormat.parse(args.format)
        if args.view == "summary":
            content = export_summary(state.grouped(), fmt)
        else:
            content = export_detail(state.detail_rows(), fmt)
        Path(args.export_path).write_text(content, encoding="utf-8")
        logger.info("Отчет сохранен в %s", args.export_path)
        return 0

    if args.view == "detail":
        _print_detail(state)
    elif args.view == "summary":
        _print_summary(state)
    else:
        _print_totals(state)
    return 0


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    if args.command == "report":
        return run_report(args)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("adsboard.api.main:app", host=args.host, port=args.port)
        return 0

    from adsboard.db.session import SessionLocal
    from adsboard.db.setup import ensure_schema

    ensure_schema()
    if args.command == "create-user":
        from adsboard.services.auth import create_user

        session = SessionLocal()
        try:
            create_user(session, args.username, args.password)
        except ValueError as exc:
            print(exc, file=sys.stderr)
            return 1
        finally:
            session.close()
    return 0


if __name__ == "__main__":
    sys.exit(run_cli())
