"""CLI entry point for Affiliate Recon.

Orchestrates the full pipeline: config loading, ingestion of both exports,
reconciliation, summary output and CSV export.

Usage::

    # Reconcile both exports and print the headline metrics
    python -m affiliate_recon.cli reconcile \\
        --campaign data/campaign.csv \\
        --ledger data/ledger.csv

    # Same, writing the two-column summary and the user table to CSV
    python -m affiliate_recon.cli reconcile \\
        --campaign data/campaign.csv --ledger data/ledger.csv \\
        -o output/summary.csv --users-output output/users.csv

    # Inspect one user against the estimated commission
    python -m affiliate_recon.cli inspect \\
        --campaign data/campaign.csv --ledger data/ledger.csv \\
        --username alice --observed 150

    # Write a config file listing every accepted header alias
    python -m affiliate_recon.cli init-config -o recon.yaml
"""

import argparse
import json
import sys
from pathlib import Path

from affiliate_recon.generator.csv_export import write_summary_csv, write_user_csv
from affiliate_recon.generator.summary import build_summary_rows, build_user_rows
from affiliate_recon.processor.coercion import resolve_rate
from affiliate_recon.processor.ingestion import READ_ERRORS, ingest
from affiliate_recon.processor.normalizer import CAMPAIGN_ALIASES, LEDGER_ALIASES
from affiliate_recon.processor.reconcile import Reconciler
from affiliate_recon.schema.config import ReconConfig
from affiliate_recon.schema.design_system import format_currency, format_percentage
from affiliate_recon.schema.loader import load_config, save_config


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------

def _load_config(args):
    """Build a ReconConfig from --config, then apply CLI overrides."""
    config = ReconConfig()
    if getattr(args, "config", None):
        path = Path(args.config)
        if not path.exists():
            _error(f"Config file not found: {path}")
        try:
            config = load_config(path)
        except ValueError as exc:
            _error(f"Invalid config {path}: {exc}")

    if getattr(args, "manual_rate", None) is not None:
        config.manual_commission_rate = args.manual_rate
    if getattr(args, "top", None) is not None:
        if args.top < 1:
            _error(f"--top must be at least 1, got {args.top}")
        config.top_n = args.top
    return config


def _build_reconciler(config):
    try:
        return Reconciler(config)
    except ValueError as exc:
        _error(str(exc))


# ---------------------------------------------------------------------------
# Data ingestion
# ---------------------------------------------------------------------------

# CLI flag -> source type
_SOURCE_FLAGS = {
    "campaign": "campaign",
    "ledger": "ledger",
}


def _warn_extra_campaign_rows(count):
    _warn(f"Campaign file has {count} data rows: using the first")


def _ingest_sources(args):
    """Ingest the campaign and ledger exports named on the command line.

    Returns (campaign_record_or_None, ledger_records_or_None).
    """
    sources = {}
    for flag, source_type in _SOURCE_FLAGS.items():
        path = getattr(args, flag, None)
        if not path:
            continue
        p = Path(path)
        if not p.exists():
            _error(f"Data file not found: {p}")
        _info(f"Ingesting {source_type} from {p}")
        options = {}
        if source_type == "campaign":
            options["on_extra_rows"] = _warn_extra_campaign_rows
        try:
            sources[source_type] = ingest(p, source_type, **options)
        except READ_ERRORS as exc:
            _error(f"Could not read {p}: {exc}")

    campaign = sources.get("campaign")
    if "campaign" in sources and campaign is None:
        _warn("Campaign file has no data rows: campaign metrics unavailable")

    ledger = sources.get("ledger")
    if "ledger" in sources and not ledger:
        _warn("Ledger file has no data rows")

    return campaign, ledger


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_reconcile(args):
    """Reconcile both exports and report the headline metrics."""
    if not args.campaign and not args.ledger:
        _error("Nothing to reconcile. Pass --campaign and/or --ledger.")

    config = _load_config(args)
    reconciler = _build_reconciler(config)
    campaign, ledger = _ingest_sources(args)

    result = reconciler.reconcile(campaign, ledger)
    if result.kpis is None:
        _warn("KPIs need both a campaign row and a ledger: showing what is available")

    rows = build_summary_rows(result)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        width = max((len(label) for label, _ in rows), default=0)
        for label, value in rows:
            print(f"{label:<{width}}  {value}")

    if args.verbose and result.users is not None:
        print()
        print(f"Top {len(result.users.top_users)} users:")
        for rank, agg in enumerate(result.users.top_users, start=1):
            display = agg.username or "(no username)"
            print(f"  {rank:2d}. {display}  {format_currency(agg.total_value)}"
                  f"  ({agg.entries} entries)")

    if args.output:
        path = write_summary_csv(args.output, rows)
        _info(f"Written: {path} ({len(rows)} metrics)")

    if args.users_output:
        if result.users is None:
            _warn("No ledger loaded: user table not written")
        else:
            user_rows = build_user_rows(result.users, result.commission_rate)
            path = write_user_csv(args.users_output, user_rows)
            _info(f"Written: {path} ({len(user_rows)} users)")


def cmd_inspect(args):
    """Show one user's ledger contribution and estimated commission."""
    config = _load_config(args)
    reconciler = _build_reconciler(config)
    campaign, ledger = _ingest_sources(args)

    result = reconciler.reconcile(campaign, ledger)
    detail = reconciler.inspect(result, args.username, observed_override=args.observed)
    if detail is None:
        _error("Username must not be empty.")

    if not detail.found:
        _warn(f"User {detail.username!r} not found in ledger")
    if campaign is None:
        _info(f"No campaign loaded: using manual rate {format_percentage(detail.commission_rate)}")

    print(f"Username:             {detail.username}")
    print(f"Entries:              {detail.entries}")
    print(f"Total value:          {format_currency(detail.total_value)}")
    print(f"Commission rate:      {format_percentage(detail.commission_rate)}")
    print(f"Estimated commission: {format_currency(detail.estimated_commission)}")
    if detail.observed_commission is not None:
        print(f"Observed commission:  {format_currency(detail.observed_commission)}")
        print(f"Variance:             {format_currency(detail.variance)}")


def cmd_init_config(args):
    """Write a config file listing the built-in header aliases."""
    output = Path(args.output)
    if output.exists() and not args.force:
        _error(f"{output} already exists. Use --force to overwrite.")
    config = ReconConfig(
        campaign_aliases={k: list(v) for k, v in CAMPAIGN_ALIASES.items()},
        ledger_aliases={k: list(v) for k, v in LEDGER_ALIASES.items()},
    )
    save_config(config, output)
    _info(f"Written: {output}")


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _info(msg):
    print(f"  {msg}", file=sys.stderr)


def _warn(msg):
    print(f"  WARNING: {msg}", file=sys.stderr)


def _error(msg):
    print(f"  ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _rate(text):
    """argparse type for --manual-rate: accepts 0.3 or 30%."""
    rate = resolve_rate(text, 0.0)
    if rate < 0 or rate > 1:
        raise argparse.ArgumentTypeError(
            f"commission rate must be between 0 and 1 (or 0%-100%), got {text!r}")
    return rate


def build_parser():
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="affiliate-recon",
        description="Reconcile affiliate campaign and user ledger exports into KPIs.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # ---- reconcile ----
    rec = subparsers.add_parser(
        "reconcile",
        help="Reconcile both exports and print headline metrics.",
    )
    _add_data_args(rec)
    _add_config_args(rec)
    rec.add_argument(
        "--top",
        type=int,
        default=None,
        help="Number of top users to rank (default: from config, 10).",
    )
    rec.add_argument(
        "-o", "--output",
        help="Write the two-column summary CSV here.",
    )
    rec.add_argument(
        "--users-output",
        dest="users_output",
        help="Write the per-user table CSV here.",
    )
    rec.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the full reconciliation as JSON instead of a table.",
    )
    rec.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Also list the top users.",
    )
    rec.set_defaults(func=cmd_reconcile)

    # ---- inspect ----
    insp = subparsers.add_parser(
        "inspect",
        help="Inspect one user's contribution against the estimated commission.",
    )
    _add_data_args(insp, ledger_required=True)
    _add_config_args(insp)
    insp.add_argument(
        "-u", "--username",
        required=True,
        help="Exact username to look up (case sensitive).",
    )
    insp.add_argument(
        "--observed",
        default=None,
        help="Observed commission for this user; 0 or empty means not supplied.",
    )
    insp.set_defaults(func=cmd_inspect)

    # ---- init-config ----
    init = subparsers.add_parser(
        "init-config",
        help="Write a YAML config listing every accepted header alias.",
    )
    init.add_argument(
        "-o", "--output",
        required=True,
        help="Config file path to write.",
    )
    init.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite an existing file.",
    )
    init.set_defaults(func=cmd_init_config)

    return parser


def _add_data_args(parser, ledger_required=False):
    """Add the two data source file arguments."""
    data = parser.add_argument_group("data sources")
    data.add_argument(
        "--campaign",
        help="Campaign summary export (.csv/.xlsx, one data row).",
    )
    data.add_argument(
        "--ledger",
        required=ledger_required,
        help="User value ledger export (.csv/.xlsx).",
    )


def _add_config_args(parser):
    """Add --config / --manual-rate args to a subparser."""
    parser.add_argument(
        "--config",
        help="Path to a YAML config file.",
    )
    parser.add_argument(
        "--manual-rate",
        dest="manual_rate",
        type=_rate,
        default=None,
        help="Commission rate when the campaign export has none (0.3 or 30%%).",
    )


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
