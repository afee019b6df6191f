import argparse
import logging
import signal
import sys
import threading
import time

from core.config_loader import load_config
from core.errors import ConfigurationError
from database.database import build_session_factory
from database.init_db import init_db
from pipeline.recompute import RecomputeJob
from pipeline.scheduler import DailySchedule, run_daily
from pipeline.streaks import StreakResetJob

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Set by SIGINT/SIGTERM; jobs stop issuing page reads once it is set
stop_event = threading.Event()


def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    stop_event.set()


def run_cycle(config, session_factory, mode='all'):
    """
    Run the jobs selected by `mode` once.

    The streak job runs first so the XP bonuses it pays are already in place
    when the recomputation job derives tiers.
    """
    cycle_start = time.time()
    summaries = []

    if mode in ('all', 'streaks') and not stop_event.is_set():
        summaries.append(StreakResetJob(config, session_factory, stop_event).run())

    if mode in ('all', 'recompute') and not stop_event.is_set():
        summaries.append(RecomputeJob(config, session_factory, stop_event).run())

    cycle_elapsed = time.time() - cycle_start
    logger.info(f"=== Cycle Completed in {cycle_elapsed:.2f}s ===")
    return summaries


def main(argv=None):
    parser = argparse.ArgumentParser(description="Creator Scoring Engine Driver")
    parser.add_argument('--mode', type=str, choices=['all', 'recompute', 'streaks'], default='all',
                        help='Jobs to run: all (default), recompute, or streaks')
    parser.add_argument('--once', action='store_true',
                        help='Run the selected jobs immediately and exit')
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to the YAML configuration file')
    parser.add_argument('--log-level', type=str, default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    args = parser.parse_args(argv)

    logging.getLogger().setLevel(args.log_level)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    # Startup phase: nothing runs with a missing or invalid weight table
    try:
        config = load_config(args.config)
        schedule = DailySchedule(config.schedule)
    except ConfigurationError as e:
        logger.error(f"Configuration error, refusing to start: {e}")
        return 2

    logger.info(f"Scoring engine starting in {args.mode.upper()} mode...")

    session_factory = build_session_factory(config.database.url)
    init_db(session_factory.kw['bind'])

    if args.once:
        summaries = run_cycle(config, session_factory, args.mode)
        return 1 if any(s.aborted or s.pages_failed for s in summaries) else 0

    logger.info(
        f"Daily schedule: {config.schedule.hour:02d}:{config.schedule.minute:02d} "
        f"{config.schedule.timezone}"
    )
    run_daily(
        schedule,
        lambda: run_cycle(config, session_factory, args.mode),
        stop_event,
        poll_seconds=config.schedule.poll_seconds
    )
    logger.info("Scoring engine stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
