import argparse
import asyncio
import json
import os
import sys
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

from redminedash.config import AppConfig
from redminedash.data import DataManager
from redminedash.logs import configure_logging
from redminedash.models import FilterState, Issue
from redminedash.redmine import RedmineError


def main():
    load_dotenv()
    configure_logging()
    parser = argparse.ArgumentParser(description="RedmineDash CLI")
    subparsers = parser.add_subparsers(dest="command")

    # Subcommands
    list_parser = subparsers.add_parser("list", help="List open issues assigned to you")
    list_parser.add_argument("--status", action="append", default=[], help="Only show this status (repeatable)")
    list_parser.add_argument("--priority", action="append", default=[], help="Only show this priority (repeatable)")
    list_parser.add_argument("--json", action="store_true", help="Print issues as JSON")
    show_parser = subparsers.add_parser("show", help="Show one issue with its description")
    show_parser.add_argument("issue_id", type=int)
    subparsers.add_parser("options", help="Show the statuses and priorities in your issues")
    subparsers.add_parser("doctor", help="Check setup and environment")

    args = parser.parse_args()

    if args.command == "list":
        sys.exit(asyncio.run(list_issues(args.status, args.priority, as_json=args.json)))
    elif args.command == "show":
        sys.exit(asyncio.run(show_issue(args.issue_id)))
    elif args.command == "options":
        sys.exit(asyncio.run(show_options()))
    elif args.command == "doctor":
        sys.exit(asyncio.run(doctor()))
    else:
        # Default: run the TUI
        from redminedash.app import run
        run()


def _format_issue(issue: Issue) -> str:
    priority = f" [{issue.priority}]" if issue.priority else ""
    return f"#{issue.id:<6} {issue.status:<12} {issue.project} ·{priority} {issue.subject}"


async def list_issues(statuses: list[str], priorities: list[str], as_json: bool = False) -> int:
    """Fetch assigned issues and print the filtered subset."""
    dm = DataManager()
    try:
        await dm.refresh_issues()
    except RedmineError as e:
        print(f"❌ Error: {e}")
        return 1

    dm.set_filter_state(FilterState(frozenset(statuses), frozenset(priorities)))
    issues = dm.displayed_issues()
    if as_json:
        print(json.dumps([asdict(issue) for issue in issues], indent=2, ensure_ascii=False))
        return 0
    if not dm.issues:
        print("No tasks to display.")
        return 0
    if not issues:
        print("No issues match the current filters.")
        return 0
    print(f"📋 {dm.config.server_name}: {dm.status_summary()}")
    for issue in issues:
        print(f"  {_format_issue(issue)}")
    return 0


async def show_issue(issue_id: int) -> int:
    """Fetch and print a single issue's detail."""
    dm = DataManager()
    try:
        detail = await dm.fetch_issue_detail(issue_id)
    except RedmineError as e:
        print(f"❌ Error: {e}")
        return 1

    print(f"#{detail.id}  {detail.subject}")
    print(f"Status     {detail.status}")
    print(f"Project    {detail.project}")
    print(f"URL        {dm.issue_url(detail.id)}")
    print()
    print(detail.description or "No description provided.")
    return 0


async def show_options() -> int:
    """Print the distinct statuses and priorities available for filtering."""
    dm = DataManager()
    try:
        await dm.refresh_issues()
    except RedmineError as e:
        print(f"❌ Error: {e}")
        return 1

    print("Statuses:")
    for status in dm.options.sorted_statuses():
        print(f"  - {status}")
    print("Priorities:")
    for priority in dm.options.sorted_priorities():
        print(f"  - {priority}")
    return 0


async def doctor() -> int:
    """Check for necessary environment variables and test the connection."""
    print("🩺 Running RedmineDash Doctor...")
    config = AppConfig.from_env()

    # 1. Check .env
    env_exists = Path(".env").exists()
    print(f"[{'✓' if env_exists else '✕'}] .env file")

    # 2. Check config file
    config_path = os.getenv("RD_CONFIG_PATH", "redminedash.config.json")
    print(f"[{'✓' if Path(config_path).exists() else '✕'}] {config_path} (using: {config.config_source})")

    # 3. Check URL and API key
    missing = config.missing_settings()
    print(f"[{'✕' if 'server_url' in missing else '✓'}] REDMINE_URL")
    print(f"[{'✕' if 'api_key' in missing else '✓'}] REDMINE_API_KEY")

    # 4. Check connection
    exit_code = 0
    if not missing:
        print(f"   - Testing connection to {config.server_url}...")
        dm = DataManager(config)
        try:
            issues = await dm.refresh_issues()
            print(f"   - OK: {len(issues)} open issues assigned to you")
        except RedmineError as e:
            print(f"   - Connection failed: {e}")
            exit_code = 1
    else:
        exit_code = 1

    print("\nDoctor check complete.")
    return exit_code


if __name__ == "__main__":
    main()
