from __future__ import annotations

import argparse
import logging
import signal
import sys
from datetime import datetime, timedelta

from PySide6.QtCore import QCoreApplication

from triage.config import SETTINGS
from triage.infra.logging import setup_logging
from triage.services.context import TriageContext
from triage.services.deadline import deadline_status
from triage.ui.audio import QtAudioSink
from triage.ui.ticker import ReminderTicker, ToastExpiry

logger = logging.getLogger("triage")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Triage tasks and watch their reminders.")
    parser.add_argument("tasks", nargs="*", help="task text, one argument per task")
    parser.add_argument("--watch", action="store_true", help="keep running and raise reminders")
    return parser


def _log_plan(context: TriageContext, now: datetime) -> None:
    plan = context.tasks.generate_plan(now)
    logger.info(plan.summary)
    for task in plan.tasks:
        line = f"[{task.quadrant} {task.score}] {task.title}"
        if task.due_date:
            status = deadline_status(task.due_date, task.created_at, now)
            line += f" ({status.label})"
        logger.info(line)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging()

    context = TriageContext(SETTINGS)
    now = datetime.now()
    for text in args.tasks:
        context.tasks.quick_add(text, now)
    _log_plan(context, now)

    if not args.watch:
        context.close()
        return 0

    app = QCoreApplication(sys.argv[:1])
    context.audio.attach_sink(QtAudioSink(on_error=context.audio.report_playback_failure))
    context.lifecycle.subscribe(lambda event: logger.info("%s: %s", event.state, event.notification.message))
    context.audio.on_warning(lambda reason: logger.warning("Visual reminders only: %s", reason))

    ticker = ReminderTicker(context.tick, SETTINGS.tick_interval_sec)
    context.attach_ticker(ticker)
    context.attach_toast_timer(ToastExpiry(context.tick, timedelta(seconds=SETTINGS.toast_timeout_sec)))
    context.tick(datetime.now())

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    try:
        return app.exec()
    finally:
        context.close()


if __name__ == "__main__":
    sys.exit(main())
