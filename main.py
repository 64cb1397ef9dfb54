"""
Scheduling engine entry point.

Runs against the in-memory demo store. Supports two modes:

Usage:
    Availability demo:  python main.py demo [service_id] [days]
    Reminder sweeper:   python main.py sweep
"""

import asyncio
import logging
import signal
import sys

from bookit.config import settings
from bookit.engine import BookingEngine
from bookit.store.memory import InMemoryStore
from bookit.store.seed import seed_demo_store
from bookit.utils import utcnow

logger = logging.getLogger(__name__)

DEMO_BUSINESS_ID = "biz-fresh-cuts"


def _build_engine() -> BookingEngine:
    store = seed_demo_store(InMemoryStore(), utcnow().date())
    return BookingEngine(store)


def _run_demo(service_id: str = "svc-haircut", days: int = 3) -> None:
    """Print open slots for the demo barbershop."""
    engine = _build_engine()
    result = engine.resolve_availability(DEMO_BUSINESS_ID, service_id, days=days)
    print(f"{result.service_name} ({result.duration_minutes} min)")
    for day, slots in result.availability.items():
        print(f"\n{day}: {len(slots)} open slots")
        for slot in slots[:8]:
            print(f"  {slot.start:%H:%M}-{slot.end:%H:%M}  {slot.provider_name}")
        if len(slots) > 8:
            print(f"  ... {len(slots) - 8} more")


def _run_sweeper() -> None:
    """Run the reminder scheduler until interrupted."""
    engine = _build_engine()

    async def _main() -> None:
        stop = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, stop.set)
            except NotImplementedError:
                pass
        logger.info("Reminder sweeper started (every %.0fs)",
                    settings.reminders.sweep_interval_seconds)
        total = await engine.reminders.run_periodically(stop)
        logger.info("Reminder sweeper stopped after %d reminders", total)

    asyncio.run(_main())


if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else "demo"
    if mode == "sweep":
        _run_sweeper()
    else:
        args = sys.argv[2:]
        _run_demo(
            args[0] if args else "svc-haircut",
            int(args[1]) if len(args) > 1 else 3,
        )
