from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from .config import get_log_level, get_server_config, load_config
from .dag.errors import TaskGraphError
from .dag.model import format_timestamp
from .logging_utils import configure_logging
from .service import TaskService
from .store import StoreError


def _resolve_project_dir(project_dir: Optional[str]) -> Path:
    return Path(project_dir).expanduser().resolve() if project_dir else Path.cwd().resolve()


def _service(args: argparse.Namespace) -> TaskService:
    return TaskService.for_project(_resolve_project_dir(args.project_dir))


def _emit(payload: Any) -> int:
    sys.stdout.write(json.dumps(payload, indent=2) + '\n')
    return 0


def _task_add(args: argparse.Namespace) -> int:
    task = _service(args).create_task(args.title, due_date=args.due, image_url=args.image_url)
    return _emit({'task': task.to_dict()})


def _task_list(args: argparse.Namespace) -> int:
    tasks = _service(args).list_tasks()
    return _emit({'tasks': [t.to_dict() for t in tasks]})


def _task_show(args: argparse.Namespace) -> int:
    return _emit({'task': _service(args).get_task(args.task_id).to_dict()})


def _task_delete(args: argparse.Namespace) -> int:
    task = _service(args).delete_task(args.task_id)
    return _emit({'deleted': task.to_dict()})


def _dep_add(args: argparse.Namespace) -> int:
    edge = _service(args).add_dependency(args.task_id, args.dependency_id)
    return _emit({'dependency': edge.to_dict()})


def _dep_remove(args: argparse.Namespace) -> int:
    _service(args).remove_dependency(args.task_id, args.dependency_id)
    return _emit({'removed': {'fromId': int(args.task_id), 'toId': int(args.dependency_id)}})


def _dep_list(args: argparse.Namespace) -> int:
    service = _service(args)
    if args.task_id is None:
        return _emit({'dependencies': [e.to_dict() for e in service.list_dependencies()]})
    return _emit(service.get_neighbors(args.task_id).to_dict())


def _render_table(service: TaskService) -> int:
    path_tasks, result = service.critical_path()
    on_path = {t.id for t in path_tasks}
    tasks = {t.id: t for t in service.list_tasks()}
    table = Table(title=f"Critical path: {' -> '.join(str(t.id) for t in path_tasks) or '(empty)'}")
    table.add_column('ID', justify='right')
    table.add_column('Title')
    table.add_column('Chain', justify='right')
    table.add_column('Finish')
    table.add_column('Earliest start')
    for tid in sorted(result.chains):
        info = result.chains[tid]
        style = 'bold red' if tid in on_path else None
        table.add_row(
            str(tid),
            tasks[tid].title if tid in tasks else '',
            str(info.chain_length),
            format_timestamp(info.finish_time) or '',
            format_timestamp(info.earliest_start) or '-',
            style=style,
        )
    Console().print(table)
    return 0


def _critical_path(args: argparse.Namespace) -> int:
    service = _service(args)
    if args.table:
        return _render_table(service)
    path_tasks, result = service.critical_path()
    return _emit({
        'criticalPath': [t.to_dict() for t in path_tasks],
        'earliestStartDates': result.earliest_start_iso(),
    })


def _server(args: argparse.Namespace) -> int:
    try:
        import uvicorn
    except ImportError:
        sys.stderr.write("Install server extras: pip install 'taskchain[server]'\n")
        return 1

    from .server import create_app

    project_dir = _resolve_project_dir(args.project_dir)
    config, _ = load_config(project_dir)
    host, port = get_server_config(config)
    app = create_app(project_dir=project_dir)
    uvicorn.run(app, host=args.host or host, port=args.port or port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='taskchain: task dependencies and critical path')
    parser.add_argument('--project-dir', default=None, help='Target project directory (default: current working directory)')
    parser.add_argument('--log-level', default=None, help='Log level (default: from config or INFO)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    server = subparsers.add_parser('server', help='Start the web server')
    server.add_argument('--host', default=None)
    server.add_argument('--port', default=None, type=int)
    server.add_argument('--reload', action='store_true')
    server.set_defaults(func=_server)

    task = subparsers.add_parser('task', help='Manage tasks')
    task_sub = task.add_subparsers(dest='task_cmd', required=True)
    tadd = task_sub.add_parser('add', help='Create a task')
    tadd.add_argument('title')
    tadd.add_argument('--due', default=None, help='Due date (YYYY-MM-DD or ISO-8601)')
    tadd.add_argument('--image-url', default=None)
    tadd.set_defaults(func=_task_add)
    tlist = task_sub.add_parser('list', help='List tasks, newest first')
    tlist.set_defaults(func=_task_list)
    tshow = task_sub.add_parser('show', help='Show one task')
    tshow.add_argument('task_id')
    tshow.set_defaults(func=_task_show)
    tdel = task_sub.add_parser('delete', help='Delete a task and its dependency edges')
    tdel.add_argument('task_id')
    tdel.set_defaults(func=_task_delete)

    dep = subparsers.add_parser('dep', help='Manage dependencies')
    dep_sub = dep.add_subparsers(dest='dep_cmd', required=True)
    dadd = dep_sub.add_parser('add', help='TASK_ID depends on DEPENDENCY_ID')
    dadd.add_argument('task_id')
    dadd.add_argument('dependency_id')
    dadd.set_defaults(func=_dep_add)
    dremove = dep_sub.add_parser('remove', help='Remove a dependency')
    dremove.add_argument('task_id')
    dremove.add_argument('dependency_id')
    dremove.set_defaults(func=_dep_remove)
    dlist = dep_sub.add_parser('list', help='List all edges, or the neighbours of one task')
    dlist.add_argument('task_id', nargs='?', default=None)
    dlist.set_defaults(func=_dep_list)

    critical = subparsers.add_parser('critical-path', help='Show the critical path and earliest starts')
    critical.add_argument('--table', action='store_true', help='Render a table instead of JSON')
    critical.set_defaults(func=_critical_path)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config, _ = load_config(_resolve_project_dir(args.project_dir))
    configure_logging(get_log_level(config, override=args.log_level))
    handler = getattr(args, 'func', None)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return int(handler(args) or 0)
    except (TaskGraphError, StoreError) as exc:
        sys.stderr.write(f"{exc.__class__.__name__}: {exc}\n")
        return 1


if __name__ == '__main__':
    sys.exit(main())
