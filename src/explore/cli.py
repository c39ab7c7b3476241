"""CLI for exploring portal-backed repositories from the terminal."""

import argparse
import sys
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from common.logger import console, error, get_logger, progress, setup_logging, success, warning

from .classifier import classify
from .clients.portal import PortalClient
from .diff_parser import diff_marker
from .explorer import RepositoryExplorer
from .formatting import format_file_size, format_relative_time, format_repository_size
from .insights import (
    average_commits_per_day,
    commits_by_date,
    contributor_color,
    daily_commits,
    language_breakdown,
    line_totals,
    most_active_day,
)
from .markdown import render_markdown
from .reconciler import contributor_percentage

logger = get_logger(__name__)

LINE_STYLES = {"addition": "green", "deletion": "red", "header": "cyan"}


def _open(args) -> RepositoryExplorer | None:
    """Open the requested repository (and branch), reporting failures."""
    client = PortalClient(base_url=args.api_url, token=args.token)
    explorer = RepositoryExplorer(client)

    progress(f"Loading repository {args.repo_id}...")
    outcome = explorer.open_repository(args.repo_id)
    if not outcome.ok:
        error(outcome.error)
        explorer.close()
        return None

    branch = getattr(args, "branch", None)
    if branch and branch != explorer.current_branch:
        switched = explorer.switch_branch(branch)
        if not switched.ok:
            error(switched.error)
            explorer.close()
            return None

    for notice in explorer.notices:
        warning(notice)
    return explorer


def cmd_overview(args):
    """Show repository summary."""
    explorer = _open(args)
    if explorer is None:
        return 1

    with explorer:
        repo = explorer.repository
        console.print(f"[bold]{escape(repo.full_name)}[/bold]  ({escape(explorer.current_branch)})")
        if repo.description:
            console.print(escape(repo.description.splitlines()[0]))
        console.print(f"Size: {format_repository_size(repo.size)}")
        console.print(f"Branches: {', '.join(explorer.all_branches())}")
        console.print(
            f"Commits: {explorer.stats.total_commits}  "
            f"Contributors: {explorer.stats.total_contributors}  "
            f"Files: {explorer.stats.total_files}"
        )
        if explorer.latest_commit:
            commit = explorer.latest_commit
            console.print(
                f"Latest: {commit.short_sha} {escape(commit.message.splitlines()[0] if commit.message else '')} "
                f"by {escape(commit.author)} ({explorer.latest_commit_age})"
            )
    return 0


def cmd_tree(args):
    """List a folder."""
    explorer = _open(args)
    if explorer is None:
        return 1

    with explorer:
        if args.path:
            outcome = explorer.open_path(args.path)
            if not outcome.ok:
                error(outcome.error)
                return 1

        table = Table(title=f"/{'/'.join(explorer.current_path)}")
        table.add_column("Name")
        table.add_column("Size", justify="right")
        table.add_column("Last commit")
        table.add_column("Updated")
        entries = sorted(explorer.files, key=lambda e: (not e.is_dir, e.name.lower()))
        for entry in entries:
            table.add_row(
                escape(entry.name + ("/" if entry.is_dir else "")),
                "" if entry.is_dir else format_file_size(entry.size),
                escape(entry.last_commit_message or ""),
                entry.last_modified,
            )
        console.print(table)
    return 0


def cmd_show(args):
    """Print a file's content, or the reason it cannot be shown."""
    explorer = _open(args)
    if explorer is None:
        return 1

    with explorer:
        parent, _, name = args.path.strip("/").rpartition("/")
        if parent:
            outcome = explorer.open_path(parent)
            if not outcome.ok:
                error(outcome.error)
                return 1

        outcome = explorer.open_file(name)
        if not outcome.ok:
            error(outcome.error)
            return 1

        view = outcome.value
        if view.image_url:
            console.print(view.image_url)
        elif view.message:
            warning(view.message)
        else:
            console.print(view.content, markup=False, highlight=False)
    return 0


def cmd_commits(args):
    """List recent commits grouped by day."""
    explorer = _open(args)
    if explorer is None:
        return 1

    with explorer:
        commits = explorer.commits[: args.limit] if args.limit else explorer.commits
        for group in commits_by_date(commits):
            console.print(f"[bold]{group.label}[/bold]")
            for commit in group.commits:
                subject = commit.message.splitlines()[0] if commit.message else ""
                console.print(
                    f"  {commit.short_sha}  {escape(subject)}  "
                    f"[dim]{escape(commit.author)}, {format_relative_time(commit.date or commit.raw_date)}[/dim]"
                )
    return 0


def cmd_diff(args):
    """Show the changes of one commit."""
    explorer = _open(args)
    if explorer is None:
        return 1

    with explorer:
        outcome = explorer.select_commit(args.sha)
        if not outcome.ok:
            error(outcome.error)
            return 1

        totals = line_totals(explorer.diff_changes)
        console.print(
            f"[bold]{explorer.selected_commit.short_sha}[/bold] "
            f"{escape(explorer.selected_commit.message)}\n"
            f"{totals.changed_files} files, [green]+{totals.additions}[/green] "
            f"[red]-{totals.deletions}[/red]"
        )

        for index, change in enumerate(explorer.diff_changes):
            console.print(f"\n[bold]{escape(change.file)}[/bold] ({change.change_type})")
            if args.stat:
                continue
            if change.is_binary:
                console.print("[dim]Binary file[/dim]")
                continue
            explorer.toggle_diff(index)
            for line in change.lines or []:
                old = "" if line.old_line_number is None else str(line.old_line_number)
                new = "" if line.new_line_number is None else str(line.new_line_number)
                style = LINE_STYLES.get(line.type, "")
                text = escape(f"{old:>5} {new:>5} {diff_marker(line)}{line.content}")
                console.print(f"[{style}]{text}[/{style}]" if style else text, highlight=False)
    return 0


def cmd_stats(args):
    """Show reconciled statistics and activity."""
    explorer = _open(args)
    if explorer is None:
        return 1

    with explorer:
        stats = explorer.stats
        success(
            f"{stats.total_commits} commits, {stats.total_contributors} contributors, "
            f"{stats.total_files} files"
        )

        table = Table(title="Contributors")
        table.add_column("Name")
        table.add_column("Commits", justify="right")
        table.add_column("Share", justify="right")
        for index, contributor in enumerate(stats.contributors):
            color = contributor_color(index)
            table.add_row(
                f"[{color}]{escape(contributor.name)}[/{color}]",
                str(contributor.commits),
                f"{contributor_percentage(contributor.commits, stats.contributors)}%",
            )
        console.print(table)

        activity = daily_commits(explorer.commits)
        console.print("[bold]Last 7 days[/bold]")
        for day in activity:
            bar = "#" * round(day.percentage / 5)
            console.print(f"  {day.label:>6}  {day.count:3d}  {bar}")
        console.print(
            f"  Average per day: {average_commits_per_day(activity)}  "
            f"Most active: {most_active_day(activity)}"
        )

        languages = language_breakdown(explorer.repository.languages)
        if languages:
            console.print("[bold]Languages[/bold]")
            for share in languages:
                console.print(f"  [{share.color}]■[/{share.color}] {escape(share.name)} {share.percentage}%")
    return 0


def cmd_render(args):
    """Render a Markdown file to HTML."""
    source = Path(args.file)
    if not source.exists():
        error(f"File not found: {source}")
        return 1

    html = render_markdown(source.read_text(encoding="utf-8"))
    if args.output:
        Path(args.output).write_text(html, encoding="utf-8")
        success(f"Wrote {args.output}")
    else:
        console.print(html, markup=False, highlight=False)
    return 0


def cmd_classify(args):
    """Classify file names."""
    table = Table()
    table.add_column("File")
    table.add_column("Category")
    table.add_column("Previewable")
    table.add_column("Editable")
    for name in args.names:
        result = classify(name)
        table.add_row(escape(name), result.category.value, str(result.previewable), str(result.editable))
    console.print(table)
    return 0


def _add_repo_arguments(parser, branch: bool = True):
    parser.add_argument("repo_id", help="Portal repository id")
    if branch:
        parser.add_argument("--branch", help="Branch to use (default: repository default branch)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-explorer",
        description="Explore repositories through the portal backend proxy",
    )
    parser.add_argument("--api-url", help="Portal backend URL (default: PORTAL_API_URL)")
    parser.add_argument("--token", help="Portal bearer token (default: PORTAL_API_TOKEN)")
    parser.add_argument("--log-level", help="Logging level (default: LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    overview_parser = subparsers.add_parser("overview", help="Show repository summary")
    _add_repo_arguments(overview_parser)
    overview_parser.set_defaults(func=cmd_overview)

    tree_parser = subparsers.add_parser("tree", help="List a folder")
    _add_repo_arguments(tree_parser)
    tree_parser.add_argument("--path", default="", help="Folder path (default: root)")
    tree_parser.set_defaults(func=cmd_tree)

    show_parser = subparsers.add_parser("show", help="Print a file")
    _add_repo_arguments(show_parser)
    show_parser.add_argument("path", help="File path within the repository")
    show_parser.set_defaults(func=cmd_show)

    commits_parser = subparsers.add_parser("commits", help="List recent commits")
    _add_repo_arguments(commits_parser)
    commits_parser.add_argument("--limit", type=int, help="Maximum number of commits to show")
    commits_parser.set_defaults(func=cmd_commits)

    diff_parser = subparsers.add_parser(
        "diff",
        help="Show the changes of a commit",
        description=(
            "Show the changed files and line diffs of a commit.\n\n"
            "Examples:\n"
            "  repo-explorer diff 42 3f2c1ab\n"
            "  repo-explorer diff 42 3f2c1ab --stat\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_repo_arguments(diff_parser)
    diff_parser.add_argument("sha", help="Commit sha (full or short)")
    diff_parser.add_argument("--stat", action="store_true", help="Only list changed files")
    diff_parser.set_defaults(func=cmd_diff)

    stats_parser = subparsers.add_parser("stats", help="Show statistics and activity")
    _add_repo_arguments(stats_parser)
    stats_parser.set_defaults(func=cmd_stats)

    render_parser = subparsers.add_parser("render", help="Render a Markdown file to HTML")
    render_parser.add_argument("file", help="Markdown file")
    render_parser.add_argument("--output", help="Write HTML here instead of printing it")
    render_parser.set_defaults(func=cmd_render)

    classify_parser = subparsers.add_parser("classify", help="Classify file names")
    classify_parser.add_argument("names", nargs="+", help="File names")
    classify_parser.set_defaults(func=cmd_classify)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level, args.log_file)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
