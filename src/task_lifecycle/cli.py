from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import EngineConfig, load_engine_config
from .derivation import derive_status, suggest_status
from .errors import TransitionError
from .executor import execute_status_transition
from .io_utils import _load_data_with_error
from .logging_utils import configure_logging, summarize_outcome
from .model import Scenario, Task, parse_status, status_to_wire
from .scenarios import get_transition_scenarios
from .utils import _parse_iso


def _resolve_project_dir(project_dir: Optional[str]) -> Path:
    return Path(project_dir).expanduser().resolve() if project_dir else Path.cwd().resolve()


def _config(args: argparse.Namespace) -> EngineConfig:
    config, err = load_engine_config(_resolve_project_dir(args.project_dir))
    if err:
        sys.stderr.write(f"Ignoring config: {err}\n")
    configure_logging(args.log_level or config.log_level)
    return config


def _load_task(path_arg: str) -> Task:
    path = Path(path_arg).expanduser()
    if not path.exists():
        raise ValueError(f"Task file not found: {path}")
    data, err = _load_data_with_error(path, {})
    if err:
        raise ValueError(err)
    return Task.from_dict(data)


def _now(args: argparse.Namespace) -> datetime:
    if not args.now:
        return datetime.now()
    parsed = _parse_iso(args.now)
    if parsed is None:
        raise ValueError(f"Invalid --now timestamp: {args.now}")
    return parsed


def _emit(payload: dict) -> None:
    sys.stdout.write(json.dumps(payload, indent=2) + '\n')


def _render_scenarios(scenarios: list[Scenario], console: Console) -> None:
    if not scenarios:
        console.print("[green]No confirmation needed[/green]")
        return
    for scenario in scenarios:
        table = Table(show_header=True, box=None)
        table.add_column("Value", style="cyan")
        table.add_column("Option")
        table.add_column("Description", style="dim")
        for option in scenario.options:
            table.add_row(option.value, option.label, option.description or "")
        console.print(Panel(table, title=f"[bold yellow]{scenario.title}[/bold yellow] ({scenario.key})"))


def _derive(args: argparse.Namespace) -> int:
    _config(args)
    task = _load_task(args.task_file)
    now = _now(args)
    suggested = suggest_status(task, now)
    _emit({
        'task_id': task.id,
        'stored_status': status_to_wire(task.status),
        'effective_status': status_to_wire(derive_status(task, now)),
        'suggested_status': status_to_wire(suggested) if suggested else None,
    })
    return 0


def _scenarios(args: argparse.Namespace) -> int:
    config = _config(args)
    task = _load_task(args.task_file)
    from_status = parse_status(args.from_status) if args.from_status else task.status
    scenarios = get_transition_scenarios(
        from_status,
        parse_status(args.to_status),
        task,
        now=_now(args),
        supports_revert_done=config.provider.supports_revert_done and not args.no_revert,
    )
    if args.pretty:
        _render_scenarios(scenarios, Console())
        return 0
    _emit({'scenarios': [s.to_dict() for s in scenarios]})
    return 0


def _parse_choices(raw: list[str]) -> dict[str, str]:
    resolution: dict[str, str] = {}
    for item in raw:
        key, sep, value = item.partition('=')
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {item!r}")
        resolution[key.strip()] = value.strip()
    return resolution


def _transition(args: argparse.Namespace) -> int:
    config = _config(args)
    task = _load_task(args.task_file)
    from_status = parse_status(args.from_status) if args.from_status else task.status
    outcome = execute_status_transition(
        task,
        from_status,
        parse_status(args.to_status),
        _parse_choices(args.choose or []),
        args.create_mode,
        now=_now(args),
        supports_revert_done=config.provider.supports_revert_done and not args.no_revert,
        user_id=config.user_id,
        next_week_days=config.next_week_days,
        copy_title_suffix=config.copy_title_suffix,
        copy_tag=config.copy_tag,
    )
    if isinstance(outcome, TransitionError):
        _emit(outcome.to_dict())
        return 2
    payload = {'summary': summarize_outcome(outcome)}
    payload.update({'task': outcome.to_dict()} if isinstance(outcome, Task) else outcome.to_dict())
    _emit(payload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Task status lifecycle engine')
    parser.add_argument('--project-dir', default=None, help='Directory holding .task_lifecycle/config.yaml (default: current working directory)')
    parser.add_argument('--log-level', default=None, help='Override the configured log level')
    subparsers = parser.add_subparsers(dest='command', required=True)

    derive = subparsers.add_parser('derive', help='Show the effective status of a task')
    derive.add_argument('task_file')
    derive.add_argument('--now', default=None, help='ISO timestamp to evaluate at')
    derive.set_defaults(func=_derive)

    scen = subparsers.add_parser('scenarios', help='List decisions a status change needs')
    scen.add_argument('task_file')
    scen.add_argument('--to', dest='to_status', required=True)
    scen.add_argument('--from', dest='from_status', default=None)
    scen.add_argument('--now', default=None)
    scen.add_argument('--no-revert', action='store_true', help='Provider cannot reopen done tasks')
    scen.add_argument('--pretty', action='store_true')
    scen.set_defaults(func=_scenarios)

    trans = subparsers.add_parser('transition', help='Apply a status change and print the result')
    trans.add_argument('task_file')
    trans.add_argument('--to', dest='to_status', required=True)
    trans.add_argument('--from', dest='from_status', default=None)
    trans.add_argument('--choose', action='append', metavar='KEY=VALUE')
    trans.add_argument('--create-mode', action='store_true')
    trans.add_argument('--now', default=None)
    trans.add_argument('--no-revert', action='store_true', help='Provider cannot reopen done tasks')
    trans.set_defaults(func=_transition)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, 'func', None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return int(handler(args) or 0)
    except ValueError as exc:
        sys.stderr.write(str(exc) + '\n')
        return 1


if __name__ == '__main__':
    sys.exit(main())
