#!/usr/bin/env python3
"""
Resolve task availability and invalidity for a team and print the result.

Usage:
    # Resolve the team's PvP progress
    python scripts/resolve_progress.py data/tasks.json data/team.yaml

    # PvE, only tasks every member can take
    python scripts/resolve_progress.py data/tasks.json data/team.yaml --mode pve --policy all

    # Repair stored rows first and write per-member API payloads
    python scripts/resolve_progress.py data/tasks.json data/team.yaml --repair --json out.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from questgraph.api import build_progress_response
from questgraph.config import QuestgraphConfig
from questgraph.engine import (
    AggregationPolicy,
    ProgressResolver,
    TeamResolution,
    TeamTaskStatus,
    classify_team_task,
    compute_station_levels,
    count_team_statuses,
    needed_by,
    station_status,
)
from questgraph.graph import process_hideout_data, process_task_data
from questgraph.loader import GameDataError, load_game_data, load_progress
from questgraph.logs import setup_logging
from questgraph.progress import GameMode
from questgraph.repair import repair_completed_task_objectives, repair_failed_task_states

BASE_DIR = Path(__file__).parent.parent

console = Console()
logger = logging.getLogger("questgraph")

STATUS_STYLES = {
    TeamTaskStatus.FAILED: "red",
    TeamTaskStatus.COMPLETED: "green",
    TeamTaskStatus.AVAILABLE: "cyan",
    TeamTaskStatus.LOCKED: "dim",
    TeamTaskStatus.INVALID: "magenta",
}


def member_label(resolution: TeamResolution, task_id: str, team_id: str) -> str:
    state = resolution.member_state(task_id, team_id)
    if state["failed"]:
        return "[red]failed[/red]"
    if state["completed"]:
        return "[green]done[/green]"
    if state["invalid"]:
        return "[magenta]invalid[/magenta]"
    if state["unlocked"]:
        return "[cyan]available[/cyan]"
    return "[dim]locked[/dim]"


def build_task_table(
    tasks, resolution: TeamResolution, aggregated: dict[str, bool], policy: AggregationPolicy
) -> Table:
    table = Table(show_header=True, box=box.SIMPLE, padding=(0, 1))
    table.add_column("Task", style="bold", no_wrap=True)
    table.add_column("Faction", width=7)
    for team_id in resolution.team_ids:
        table.add_column(team_id, no_wrap=True)
    table.add_column("Team", no_wrap=True)
    table.add_column(f"Obtainable ({policy.value})", justify="center")
    table.add_column("Needed by")

    for task in tasks:
        status = classify_team_task(task, resolution)
        if status is None:
            continue
        style = STATUS_STYLES[status]
        table.add_row(
            task.name or task.id,
            task.faction_name,
            *(member_label(resolution, task.id, team_id) for team_id in resolution.team_ids),
            f"[{style}]{status.value}[/{style}]",
            "[green]yes[/green]" if aggregated.get(task.id) else "[dim]no[/dim]",
            ", ".join(needed_by(task, resolution)),
        )
    return table


def build_hideout_table(stations, station_levels: dict[str, dict[str, int]], team_ids: list[str]) -> Table:
    table = Table(show_header=True, box=box.SIMPLE, padding=(0, 1))
    table.add_column("Station", style="bold", no_wrap=True)
    for team_id in team_ids:
        table.add_column(team_id, no_wrap=True)

    for station in stations:
        cells = []
        for team_id in team_ids:
            member_levels = {
                station_id: levels.get(team_id, 0) for station_id, levels in station_levels.items()
            }
            status = station_status(station, member_levels)
            cells.append(f"{member_levels.get(station.id, 0)}/{station.max_level} {status.value}")
        table.add_row(station.name or station.id, *cells)
    return table


def main() -> None:
    parser = argparse.ArgumentParser(description="Resolve team task progress")
    parser.add_argument("game_data", type=Path, help="JSON/YAML game data (tasks, hideoutStations)")
    parser.add_argument("progress", type=Path, help="JSON/YAML team progress document")
    parser.add_argument("--mode", choices=[mode.value for mode in GameMode], help="Game mode")
    parser.add_argument(
        "--policy",
        choices=[policy.value for policy in AggregationPolicy],
        default=AggregationPolicy.ANY.value,
        help="Team aggregation policy",
    )
    parser.add_argument("--config", type=Path, default=BASE_DIR / "config.yaml", help="Config file")
    parser.add_argument("--repair", action="store_true", help="Repair stored rows before resolving")
    parser.add_argument("--json", type=Path, dest="json_out", help="Write per-member API payloads")
    args = parser.parse_args()

    try:
        config = QuestgraphConfig.load(args.config)
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(config.logging)
    mode = GameMode(args.mode or config.data.game_mode)
    default_edition = config.data.default_game_edition
    policy = AggregationPolicy(args.policy)

    try:
        game_data = load_game_data(args.game_data)
        rows = load_progress(args.progress, default_edition)
    except (GameDataError, FileNotFoundError) as e:
        logger.error(f"Could not load input: {e}")
        sys.exit(1)

    task_data = process_task_data(game_data.tasks, warn_on_cycles=config.engine.warn_on_cycles)
    hideout_data = process_hideout_data(game_data.hideout_stations)
    logger.info(
        f"Prepared {len(task_data.tasks)} tasks and {len(hideout_data.modules)} hideout modules"
    )

    if args.repair:
        for team_id, row in rows.items():
            failed = repair_failed_task_states(task_data.tasks, row)
            objectives = repair_completed_task_objectives(task_data.tasks, row)
            logger.info(
                f"Repaired {team_id}: {failed.total} failed tasks, {objectives.total} objectives"
            )

    team = {team_id: row.for_mode(mode) for team_id, row in rows.items()}
    resolver = ProgressResolver(task_data.tasks, config.engine)
    resolution = resolver.resolve_team(team)
    aggregated = resolver.aggregate(resolution, policy)

    console.print(build_task_table(task_data.tasks, resolution, aggregated, policy))

    counts = count_team_statuses(task_data.tasks, resolution)
    console.print(
        " | ".join(f"{status}: {count}" for status, count in counts.items()),
        style="bold",
    )

    if game_data.hideout_stations:
        station_levels = compute_station_levels(
            game_data.hideout_stations,
            team,
            {team_id: row.edition(default_edition) for team_id, row in rows.items()},
            game_data.editions,
            default_edition,
        )
        console.print(build_hideout_table(game_data.hideout_stations, station_levels, list(team)))

    if args.json_out:
        payloads = {
            team_id: build_progress_response(
                row,
                team_id,
                mode,
                task_data.tasks,
                game_data.hideout_stations,
                game_data.editions,
                default_game_edition=default_edition,
            ).model_dump(mode="json", by_alias=True, exclude_none=True)
            for team_id, row in rows.items()
        }
        with open(args.json_out, "w", encoding="utf-8") as f:
            json.dump(payloads, f, indent=2)
        console.print(f"[green]Wrote {len(payloads)} payloads to {args.json_out}[/green]")


if __name__ == "__main__":
    main()
