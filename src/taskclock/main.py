"""
taskclock CLI

Parses one transcript and prints the task it would create.

Usage:
    taskclock "call mom every sunday"
    taskclock "pay rent on the 1st every month" --now 2025-01-25T10:00 --json
    taskclock "take medication at 8am" --debug --console
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import NoReturn, Optional

from taskclock import __version__
from taskclock.config import TaskClockConfig, get_config
from taskclock.engine import (
    NoSpeechDetected,
    ScheduledTask,
    TaskEngine,
    confirmation_message,
    relative_time_display,
    score_task,
    time_remaining_display,
    urgency_level,
)
from taskclock.events import EventBus
from taskclock.utils.logging import get_logger, setup_logging


async def run_capture(config: TaskClockConfig, text: str, now: datetime) -> ScheduledTask:
    """Run one transcript through a fresh engine."""
    bus = EventBus(
        max_queue_size=config.events.max_queue_size,
        handler_timeout=config.events.handler_timeout,
    )
    engine = TaskEngine(config=config, event_bus=bus, now_fn=lambda: now)
    return await engine.process(text, now)


def render(task: ScheduledTask, now: datetime, as_json: bool) -> str:
    task_score = score_task(task, now)
    seconds = task.seconds_remaining(now)

    if as_json:
        data = task.to_dict()
        data.update(
            score=round(task_score.value, 2),
            band=task_score.band.value,
            time_remaining=time_remaining_display(seconds),
            level=urgency_level(seconds).value,
        )
        return json.dumps(data, indent=2)

    lines = [
        confirmation_message(task),
        f"  due:      {task.due_at:%a %Y-%m-%d %H:%M} ({time_remaining_display(seconds)})",
        f"  priority: {task.priority.value}",
        f"  repeats:  {task.frequency.value}",
        f"  urgency:  {task_score.value:.1f} [{task_score.band.value}]",
        f"  level:    {urgency_level(seconds).value}",
    ]
    hint = relative_time_display(seconds)
    if hint:
        lines.append(f"  feels like: {hint}")
    return "\n".join(lines)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="taskclock",
        description="Turn a spoken-style sentence into a scheduled task",
    )
    parser.add_argument("text", help="Transcript to parse")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Reference time as ISO 8601 (default: current time)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the task as JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Use pretty console logging instead of JSON",
    )

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> NoReturn:
    """Main entry point for the taskclock command."""
    args = parse_args(argv)

    config = get_config()
    if args.debug:
        config.log.level = "DEBUG"
    if args.console:
        config.log.format = "console"

    setup_logging(
        level=config.log.level,
        format=config.log.format,
        log_file=config.log.file,
    )
    logger = get_logger("taskclock.cli")

    now = args.now or datetime.now()
    try:
        task = asyncio.run(run_capture(config, args.text, now))
    except NoSpeechDetected as e:
        logger.warning("no_speech_detected")
        print(str(e), file=sys.stderr)
        sys.exit(2)

    print(render(task, now, args.json))
    sys.exit(0)


if __name__ == "__main__":
    main()
