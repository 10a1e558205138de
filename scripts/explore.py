#!/usr/bin/env python3
"""Interactive terminal explorer for the actor network.

Usage:
    python scripts/explore.py
    python scripts/explore.py --api http://localhost:3001/api --mode spatial

Type a question to interrogate the principal, or a /command to browse.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")

# Add src to path
sys.path.insert(0, str(project_root / "src"))

from actornet.chat.llm_client import close_llm_client
from actornet.models import ViewMode
from actornet.state import ViewController
from actornet.storage import QueryServiceClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

HELP_TEXT = """
Actor Network Explorer
======================

Commands:
  /stats               - Dataset statistics and current record count
  /top [n]             - Most connected entities in the graph view
  /entity NAME         - Select an entity and show its connection groups
  /explain             - Ask the principal about the selected entity
  /locations           - Location buckets by event count
  /location NAME       - Select a location and list its events
  /event N             - Select event N of the selected location
  /document            - Open the selected event's source document
  /unlocated           - People in events with no known location
  /search TEXT         - Search actors by name
  /years MIN MAX       - Set the year range
  /keyword TEXT        - Set the keyword filter
  /cluster ID          - Toggle a tag cluster
  /category NAME       - Toggle a document category
  /density N           - Minimum density percentage (0-100)
  /hops N              - Maximum hop distance ("none" for unbounded)
  /mode MODE           - View mode: graph, depth or spatial
  /help                - Show this help
  /quit                - Exit

Anything else is asked as a question.
"""


def format_top(controller: ViewController, limit: int) -> str:
    snapshot = controller.snapshot
    hops = snapshot.aggregation.hop_distances
    lines = [f"Top {min(limit, len(snapshot.graph.nodes))} of {len(snapshot.graph.nodes)} entities:"]
    for node in snapshot.graph.nodes[:limit]:
        hop = hops.get(node.id)
        hop_label = f"{hop} hops" if hop is not None else "unreachable"
        lines.append(f"  {node.id:40} {node.connections:6}  {hop_label}")
    return "\n".join(lines)


def format_entity(controller: ViewController) -> str:
    groups = controller.connection_groups
    if not groups:
        return f"No records for {controller.selected_entity}."
    lines = [f"{controller.selected_entity}: {len(groups)} counterparties"]
    for group in groups[:20]:
        span = f"{group.earliest_date or '?'} .. {group.latest_date or '?'}"
        lines.append(f"  {group.counterparty:40} {group.count:5}  {span}")
    return "\n".join(lines)


def format_locations(controller: ViewController) -> str:
    index = controller.snapshot.aggregation.locations
    lines = [
        f"{index.total_located_events} located events, "
        f"{index.total_unknown_events} without a known location"
    ]
    for bucket in index.buckets:
        lines.append(f"  {bucket.name:30} {bucket.event_count:6} events  {len(bucket.people)} people")
    return "\n".join(lines)


def format_location(controller: ViewController) -> str:
    bucket = controller.selected_location_bucket
    if bucket is None:
        return f"Unknown location: {controller.selected_location}"
    lines = [f"{bucket.name}: {bucket.event_count} events"]
    for i, record in enumerate(bucket.relationships[:30], start=1):
        lines.append(f"  [{i}] {record.describe()}")
    return "\n".join(lines)


async def handle_command(controller: ViewController, command: str, arg: str) -> str:
    if command == "/stats":
        stats = controller.stats
        header = (
            f"Documents: {stats.total_documents}  Relationships: {stats.total_relationships}  "
            f"Actors: {stats.total_actors}\n" if stats else ""
        )
        return f"{header}Loaded records: {len(controller.records)}"
    if command == "/top":
        return format_top(controller, int(arg) if arg else 20)
    if command == "/entity":
        controller.select_entity(arg)
        return format_entity(controller)
    if command == "/explain":
        return await controller.explain_entity()
    if command == "/locations":
        return format_locations(controller)
    if command == "/location":
        controller.select_location(arg)
        return format_location(controller)
    if command == "/event":
        bucket = controller.selected_location_bucket
        if bucket is None:
            return "Select a location first."
        record = bucket.relationships[int(arg) - 1]
        controller.select_event(record)
        answer = await controller.explain_event(record)
        return f"{record.describe()}\n\n{answer}"
    if command == "/document":
        event = controller.selected_event
        if event is None:
            return "Select an event first."
        view = await controller.open_document(event)
        answer = await controller.explain_document(event)
        return f"{view.doc_id} ({view.category})\n{view.text[:1500]}\n\n{answer}"
    if command == "/unlocated":
        bubbles = controller.snapshot.bubbles
        return "\n".join(f"  {b.name:40} {b.connections:5}" for b in bubbles[:30]) or "None."
    if command == "/search":
        actors = await controller.search_actors(arg)
        return "\n".join(f"  {a.name} ({a.connection_count})" for a in actors) or "No matches."
    if command == "/mode":
        controller.set_view_mode(ViewMode(arg))
        return f"View mode: {controller.view_mode.value}"

    # Filter edits: apply immediately rather than waiting for the debounce
    if command == "/years":
        low, high = (int(v) for v in arg.split())
        controller.set_year_range(low, high)
    elif command == "/keyword":
        controller.set_keyword(arg)
    elif command == "/density":
        controller.set_min_density(int(arg))
    elif command == "/hops":
        controller.set_max_hops(None if arg.lower() == "none" else int(arg))
    elif command == "/cluster":
        controller.toggle_cluster(int(arg))
    elif command == "/category":
        controller.toggle_category(arg)
    else:
        return f"Unknown command: {command}"

    controller.flush_filters()
    await controller.wait_idle()
    if controller.refetch_error:
        return f"Refetch failed, showing previous data: {controller.refetch_error}"
    return f"Filters applied: {len(controller.records)} records"


async def main() -> bool:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Explore the actor network and interrogate the principal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--api", help="Query service base URL")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in ViewMode],
        default=ViewMode.GRAPH.value,
        help="Initial view mode",
    )
    parser.add_argument("--seed", type=int, help="Seed for layout jitter")
    args = parser.parse_args()

    query_client = QueryServiceClient(base_url=args.api)
    controller = ViewController(query_client=query_client, seed=args.seed)
    controller.set_view_mode(ViewMode(args.mode))

    while not await controller.initialize():
        print(f"Error: {controller.load_error}")
        if not controller.can_retry or input("Retry? [y/N] ").strip().lower() != "y":
            await query_client.close()
            return False

    print(HELP_TEXT)
    print(f"Loaded {len(controller.records)} records")
    print("-" * 50)

    try:
        while True:
            try:
                user_input = input("\nYou: ").strip()
            except EOFError:
                break

            if not user_input:
                continue
            if user_input.lower() in ["/quit", "/exit", "/q"]:
                print("Goodbye!")
                break
            if user_input.lower() == "/help":
                print(HELP_TEXT)
                continue

            if user_input.startswith("/"):
                command, _, arg = user_input.partition(" ")
                try:
                    print(await handle_command(controller, command.lower(), arg.strip()))
                except (ValueError, IndexError) as e:
                    print(f"Invalid argument: {e}")
            else:
                print(f"\n{await controller.ask(user_input)}")
    finally:
        await controller.close()
        await query_client.close()
        await close_llm_client()

    return True


if __name__ == "__main__":
    success = asyncio.run(main())
    sys.exit(0 if success else 1)
