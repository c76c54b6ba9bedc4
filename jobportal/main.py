"""Main entry point for the job portal matching and retention service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import logging
import signal
import sys
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

from jobportal.config.environment import EnvironmentConfig
from jobportal.config.exceptions import ConfigurationError
from jobportal.config.loader import load_config
from jobportal.config.models import AppConfig
from jobportal.dispatch import BackgroundDispatcher
from jobportal.logging import get_logger
from jobportal.logging.config import configure_logging
from jobportal.matching import SkillMatcher, SuggestionService
from jobportal.notifications import (
    JobMatchNotifier,
    MatchTriggers,
    NotificationMailbox,
    TemplateRenderer,
)
from jobportal.persistence.database import close_database, init_database
from jobportal.profiles import SkillService
from jobportal.retention import RetentionSweeper
from jobportal.scheduler import SweepScheduler, Ticker

logger = get_logger(__name__, component="cli")


@dataclass
class PortalServices:
    """Shared service instances wired from one configuration."""

    matcher: SkillMatcher
    notifier: JobMatchNotifier
    dispatcher: BackgroundDispatcher
    triggers: MatchTriggers
    mailbox: NotificationMailbox
    suggestions: SuggestionService
    skills: SkillService
    sweeper: RetentionSweeper

    def shutdown(self, wait: bool = True) -> None:
        self.dispatcher.shutdown(wait=wait)


def build_services(app_config: AppConfig) -> PortalServices:
    """Wire the services; the database must already be initialized."""
    matcher = SkillMatcher(app_config.matching)
    notifier = JobMatchNotifier(
        matcher=matcher, renderer=TemplateRenderer(), config=app_config.matching
    )
    dispatcher = BackgroundDispatcher(max_workers=app_config.worker.max_workers)
    triggers = MatchTriggers(notifier, dispatcher)

    return PortalServices(
        matcher=matcher,
        notifier=notifier,
        dispatcher=dispatcher,
        triggers=triggers,
        mailbox=NotificationMailbox(),
        suggestions=SuggestionService(matcher=matcher, config=app_config.matching),
        skills=SkillService(triggers=triggers),
        sweeper=RetentionSweeper(config=app_config.retention),
    )


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Priority for the log level: CLI > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif not env_config.log_level:
        env_config.log_level = app_config.logging.level or "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Job portal core - skill match notifications and retention sweeps"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--sweep-once",
        action="store_true",
        help="Run both retention sweeps immediately and exit",
    )
    mode.add_argument(
        "--notify-job",
        type=int,
        metavar="JOB_ID",
        help="Run the job-approved fan-out for one job and exit",
    )
    mode.add_argument(
        "--notify-user",
        type=int,
        metavar="USER_ID",
        help="Run the skills-added fan-out for one user and exit",
    )
    return parser


def run_daemon(
    services: PortalServices, app_config: AppConfig, ticker: Optional[Ticker] = None
) -> int:
    """Run the sweep scheduler until SIGINT or SIGTERM."""
    shutdown_event = threading.Event()
    scheduler = SweepScheduler(
        services.sweeper,
        ticker=ticker,
        config=app_config.retention,
        shutdown_event=shutdown_event,
    )

    def signal_handler(signum, frame):
        logger.info(
            f"Received signal {signum}, shutting down",
            extra={"event": "service.signal_received", "signal": signum},
        )
        scheduler.shutdown(wait=False)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    scheduler.start()
    logger.info(
        "Scheduler started. Press Ctrl+C to stop",
        extra={"event": "service.daemon_mode.started"},
    )

    try:
        shutdown_event.wait()
    except KeyboardInterrupt:
        logger.info(
            "Keyboard interrupt received, shutting down",
            extra={"event": "service.keyboard_interrupt"},
        )
        scheduler.shutdown(wait=False)

    return 0


def run_one_shot(services: PortalServices, args: argparse.Namespace) -> int:
    """Run the requested one-shot command synchronously."""
    if args.sweep_once:
        results = services.sweeper.run_all()
        for result in results:
            logger.info(
                f"Sweep {result.name}: {result.deleted} deleted",
                extra={
                    "event": "service.sweep_once.result",
                    "sweep": result.name,
                    "deleted": result.deleted,
                    "error": result.error,
                },
            )
        return 0 if all(result.succeeded for result in results) else 1

    if args.notify_job is not None:
        result = services.notifier.notify_for_job(args.notify_job)
    else:
        result = services.notifier.notify_for_user(args.notify_user)

    logger.info(
        f"Fan-out finished: {result.created} notifications created",
        extra={"event": "service.fanout_once.completed", **result.as_log_fields()},
    )
    return 1 if result.aborted or result.failed else 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    args = build_parser().parse_args(argv)
    one_shot = args.sweep_once or args.notify_job is not None or args.notify_user is not None

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        configure_logging(
            level=env_config.log_level,
            format_type=app_config.logging.format,
            environment=env_config.environment,
        )
        logging.captureWarnings(True)

        logger.info(
            "Job portal core starting",
            extra={
                "event": "service.starting",
                "config_path": app_config.source_path,
                "log_level": env_config.log_level,
                "one_shot": one_shot,
            },
        )

        init_database(env_config.database_url)
        services = build_services(app_config)

        logger.info(
            "Services initialized",
            extra={
                "event": "services.initialized",
                "max_workers": app_config.worker.max_workers,
                "notify_threshold": app_config.matching.notify_threshold,
            },
        )

        try:
            if one_shot:
                exit_code = run_one_shot(services, args)
            else:
                exit_code = run_daemon(services, app_config)
        finally:
            services.shutdown(wait=True)
            close_database()

        logger.info(
            "Job portal core stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error during startup",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
