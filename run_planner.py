"""
Main Execution Script for the Reactor Planner.
Loads fleet data (cache file or demo generator), prints the monthly occupancy
report, asks the analyst for a brief, and exports a dashboard JSON file.
"""

import os
import sys
import json
import logging
from datetime import datetime
from typing import Dict, List, Optional

# Add current directory to path so imports work
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from generators.data_factory import DemoDataFactory
from insights.analyst import OccupancyAnalyst, bullet_lines
from models import Booking, MaintenanceWindow, Reactor, ReportingPeriod
from scheduler.occupancy import compute_occupancy, monthly_trend, summarize_by_block
from scheduler.store import InMemoryRecordStore

logger = logging.getLogger("Main")

# --- CONFIGURATION ---
CACHE_FILENAME = os.environ.get("PLANNER_DATA_FILE", "planner_data.json")
USE_CACHE = True # Set to False to always start from the demo fleet
EXPORT_FILENAME = "dashboard_data.json"
TREND_MONTHS = 6
# ---------------------


def save_data(data: dict, filename: str):
    """Helper to save fleet data so later runs start from the same records."""
    serializable = {}
    for key, val in data.items():
        if isinstance(val, list):
            serializable[key] = [item.model_dump(mode='json') for item in val]

    with open(filename, 'w') as f:
        json.dump(serializable, f, indent=2)
    logger.info(f"Saved fleet data to {filename}")


def load_cached_data(filename: str) -> Optional[Dict[str, list]]:
    """
    Helper to load JSON data and reconstruct Pydantic objects.
    """
    try:
        with open(filename, 'r') as f:
            data = json.load(f)

        logger.info(f"Loading cached data from {filename}...")

        reactors = [Reactor(**item) for item in data.get('reactors', [])]
        bookings = [Booking(**item) for item in data.get('bookings', [])]
        downtimes = [MaintenanceWindow(**item) for item in data.get('downtimes', [])]

        logger.info(f"Cache Loaded: {len(reactors)} reactors, {len(bookings)} bookings, {len(downtimes)} downtimes.")
        return {"reactors": reactors, "bookings": bookings, "downtimes": downtimes}

    except (FileNotFoundError, json.JSONDecodeError):
        logger.warning(f"Cache file {filename} not found or invalid. Falling back to demo data.")
        return None


def build_store(data: Dict[str, list]) -> InMemoryRecordStore:
    """Load records as-is: historical data is trusted, not re-validated."""
    store = InMemoryRecordStore()
    store.load(data["reactors"], data["bookings"], data["downtimes"])
    return store


def export_dashboard_data(store: InMemoryRecordStore, period: ReportingPeriod, now: datetime,
                          filename: str = EXPORT_FILENAME, insights: str = "") -> dict:
    """
    Serializes the current report into a JSON format for the frontend.
    """
    logger.info(f"Exporting dashboard data to {filename}...")

    reactors = store.list_reactors()
    bookings = store.list_bookings()
    downtimes = store.list_downtimes()
    metrics = compute_occupancy(period, reactors, bookings, downtimes)

    data = {
        "period": period.label,
        "generated_at": now.isoformat(),
        "metrics": [m.model_dump(mode='json') for m in metrics],
        "blocks": [b.model_dump(mode='json') for b in summarize_by_block(metrics)],
        "trend": [
            t.model_dump(mode='json')
            for t in monthly_trend(now, TREND_MONTHS, reactors, bookings, downtimes)
        ],
        "downtimes": [],
        "insights": insights
    }

    for d in sorted(downtimes, key=lambda d: d.start_datetime):
        entry = d.model_dump(mode='json')
        entry["status"] = d.status(now).value
        data["downtimes"].append(entry)

    with open(filename, 'w') as f:
        json.dump(data, f, indent=2)
    logger.info("Dashboard data exported.")
    return data


def format_report(metrics) -> List[str]:
    lines = [f"{'Reactor':<8} {'Block':<10} {'Actual %':>9} {'Proposed %':>11} {'Down h':>7} {'Avail h':>8}"]
    for m in sorted(metrics, key=lambda m: m.actual_percent, reverse=True):
        lines.append(
            f"{m.reactor_serial_no:<8} {m.block_name:<10} {m.actual_percent:>9.1f} "
            f"{m.proposed_percent:>11.1f} {m.downtime_hours:>7} {m.available_hours:>8}"
        )
    return lines


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )

    now = datetime.now()
    logger.info("Starting Reactor Planner report...")

    # --- PHASE 1: DATA ACQUISITION (Cache vs. Demo) ---
    data = load_cached_data(CACHE_FILENAME) if USE_CACHE else None
    if not data:
        data = DemoDataFactory(now).build()
        save_data(data, CACHE_FILENAME)

    store = build_store(data)

    # --- PHASE 2: OCCUPANCY ---
    period = ReportingPeriod.containing(now)
    metrics = compute_occupancy(period, store.list_reactors(), store.list_bookings(), store.list_downtimes())

    print("\n" + "="*50)
    print(f"REACTOR OCCUPANCY - {period.label}")
    print("="*50)
    for line in format_report(metrics):
        print(line)

    # --- PHASE 3: INSIGHTS ---
    analyst = OccupancyAnalyst()
    insights = analyst.generate_insights(metrics, store.list_reactors())
    print("\nANALYST BRIEF")
    for line in bullet_lines(insights):
        print(f" - {line}")
    if analyst.total_cost:
        logger.info(f"Estimated LLM Cost: ${analyst.total_cost:.4f}")

    # --- PHASE 4: EXPORT FOR FRONTEND ---
    export_dashboard_data(store, period, now, EXPORT_FILENAME, insights)

    print("\nReport Complete.")


if __name__ == "__main__":
    main()
