"""View and selection state shared by every view.

The controller sequences work; it has no business logic of its own:
- filter edits are echoed locally at once and applied after a quiet period
- applying filters replaces the record list (never mutates it in place)
- derived aggregates and layouts are recomputed lazily on the next read
- exactly one detail panel (entity, location or event) is active
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field, replace
from enum import Enum

import numpy as np

from actornet.chat.interrogator import (
    DOCUMENT_FAILURE_ANSWER,
    ChatSession,
    Interrogator,
)
from actornet.chat.llm_client import LLMClient
from actornet.config import settings
from actornet.graph.aggregation import (
    Aggregation,
    aggregate,
    connected_to,
    group_connections,
    records_for_entity,
    search_nodes,
)
from actornet.layout.bubble import BubbleViewport, layout_bubbles
from actornet.layout.force import ForceSimulation
from actornet.layout.spatial import adapt_to_spatial_graph, compute_ring_positions
from actornet.models import (
    Actor,
    BubbleNode,
    ConnectionGroup,
    DocumentSummary,
    DocumentView,
    FilterState,
    GraphNode,
    LocationBucket,
    RelationshipRecord,
    SpatialGraphData,
    Stats,
    TagCluster,
    TopGraph,
    ViewMode,
)
from actornet.models.graph import Position3D
from actornet.state.scheduling import Animator, Debouncer
from actornet.storage import QueryServiceClient, get_query_client

logger = logging.getLogger(__name__)

DOCUMENT_LOAD_FAILED = "Failed to load document content."
LOAD_ERROR_MESSAGE = "Cannot connect to the query service."


class DetailPanel(str, Enum):
    NONE = "none"
    ENTITY = "entity"
    LOCATION = "location"
    EVENT = "event"


@dataclass
class ViewSnapshot:
    """Everything derived from one record list and one filter state."""

    aggregation: Aggregation
    graph: TopGraph
    spatial: SpatialGraphData
    ring_positions: dict[str, Position3D] = field(default_factory=dict)
    bubbles: list[BubbleNode] = field(default_factory=list)
    simulation: ForceSimulation | None = None


def default_filters() -> FilterState:
    return FilterState(
        year_min=settings.default_year_min,
        year_max=settings.default_year_max,
        max_hops=settings.default_max_hops,
        limit=settings.default_fetch_limit,
    )


class ViewController:
    """Process-wide selection, filter and derived-view state."""

    def __init__(
        self,
        query_client: QueryServiceClient | None = None,
        llm_client: LLMClient | None = None,
        principal: str | None = None,
        seed: int | None = None,
    ) -> None:
        self.query_client = query_client or get_query_client()
        self.principal = principal or settings.principal_entity
        self.interrogator = Interrogator(
            search_client=self.query_client,
            llm_client=llm_client,
            principal=self.principal,
        )
        self.chat = ChatSession(self.interrogator)

        # Applied filters drive fetching; pending filters echo live input
        self.filters = default_filters()
        self.pending_filters = self.filters

        self.records: tuple[RelationshipRecord, ...] = ()
        self.view_mode = ViewMode.GRAPH

        self.selected_entity: str | None = None
        self.selected_location: str | None = None
        self.selected_event: RelationshipRecord | None = None
        self.document: DocumentView | None = None

        self.stats: Stats | None = None
        self.clusters: list[TagCluster] = []
        self.initialized = False
        self.loading = False
        self.load_error: str | None = None
        self.refetch_error: str | None = None

        self.bubble_viewport = BubbleViewport()
        self.bubble_person: str | None = None

        self.fetch_count = 0
        self.recompute_count = 0

        self._seed = seed
        self._rng = np.random.default_rng(seed)
        self._debouncer: Debouncer[FilterState] = Debouncer(self._apply_filters, name="filters")
        self._animator = Animator()
        self._refetch_task: asyncio.Task | None = None
        self._snapshot: ViewSnapshot | None = None
        self._dirty = True

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def can_retry(self) -> bool:
        return self.load_error is not None

    async def initialize(self) -> bool:
        """
        Load stats and tag clusters, enable every cluster and category,
        then fetch the first record set. Returns False on failure.
        """
        self.load_error = None
        try:
            clusters, stats = await asyncio.gather(
                self.query_client.fetch_tag_clusters(),
                self.query_client.fetch_stats(),
            )
        except Exception as e:
            logger.error(f"Initialization failed: {e}")
            self.load_error = LOAD_ERROR_MESSAGE
            return False

        self.clusters = clusters
        self.stats = stats
        self.filters = replace(
            self.filters,
            cluster_ids=frozenset(c.id for c in clusters),
            categories=frozenset(stats.categories),
        )
        self.pending_filters = self.filters
        self.initialized = True
        logger.info(
            f"Initialized: {len(clusters)} clusters, {len(stats.categories)} categories"
        )

        await self.refetch()
        return True

    async def retry(self) -> bool:
        return await self.initialize()

    def request_refetch(self) -> asyncio.Task:
        """Start fetching records for the applied filters, cancelling any fetch in flight."""
        if self._refetch_task is not None and not self._refetch_task.done():
            self._refetch_task.cancel()
        self._refetch_task = asyncio.create_task(self._load_records(self.filters))
        return self._refetch_task

    async def refetch(self) -> None:
        task = self.request_refetch()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def wait_idle(self) -> None:
        """Wait for the in-flight fetch, if any, to settle."""
        if self._refetch_task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self._refetch_task

    async def _load_records(self, filters: FilterState) -> None:
        self.loading = True
        self.fetch_count += 1
        try:
            records = await self.query_client.fetch_relationships(filters)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Keep the previous records on screen
            logger.error(f"Refetch failed, keeping {len(self.records)} records: {e}")
            self.refetch_error = str(e)
            return
        finally:
            # A replaced fetch must not clear the flag its successor raised
            if self._refetch_task in (None, asyncio.current_task()):
                self.loading = False

        self.refetch_error = None
        self.records = tuple(records)
        self._dirty = True

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def _edit(self, filters: FilterState) -> None:
        """Echo a continuous edit now, apply it once input goes quiet."""
        self.pending_filters = filters
        self._debouncer.schedule(filters)

    def _apply_now(self, filters: FilterState) -> None:
        """Apply a discrete edit together with any pending continuous edits."""
        self._debouncer.cancel()
        self.pending_filters = filters
        self._apply_filters(filters)

    def _apply_filters(self, filters: FilterState) -> None:
        previous, self.filters = self.filters, filters
        if previous == filters:
            return
        # Density is a client-side threshold, the record set is unchanged
        if replace(previous, min_density=filters.min_density) == filters:
            self._dirty = True
            return
        self.request_refetch()

    def set_year_range(self, year_min: int, year_max: int) -> None:
        self._edit(self.pending_filters.with_year_range(year_min, year_max))

    def set_keyword(self, keyword: str) -> None:
        self._edit(self.pending_filters.with_keyword(keyword))

    def set_limit(self, limit: int) -> None:
        self._edit(self.pending_filters.with_limit(limit))

    def set_max_hops(self, max_hops: int | None) -> None:
        self._edit(self.pending_filters.with_max_hops(max_hops))

    def set_min_density(self, min_density: int) -> None:
        self._edit(self.pending_filters.with_min_density(min_density))

    def toggle_cluster(self, cluster_id: int) -> None:
        self._apply_now(self.pending_filters.with_toggled_cluster(cluster_id))

    def toggle_category(self, category: str) -> None:
        self._apply_now(self.pending_filters.with_toggled_category(category))

    def set_include_undated(self, include: bool) -> None:
        self._apply_now(self.pending_filters.with_include_undated(include))

    @property
    def has_pending_filters(self) -> bool:
        return self._debouncer.pending

    def flush_filters(self) -> None:
        """Apply pending continuous edits without waiting for the quiet period."""
        self._debouncer.flush()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def set_view_mode(self, mode: ViewMode) -> None:
        if mode != self.view_mode:
            self.view_mode = ViewMode(mode)
            self._dirty = True

    @property
    def snapshot(self) -> ViewSnapshot:
        if self._snapshot is None or self._dirty:
            self._snapshot = self._recompute()
            self._dirty = False
        return self._snapshot

    def _recompute(self) -> ViewSnapshot:
        records = self.records
        aggregation = aggregate(
            records,
            principal=self.principal,
            min_density=self.filters.min_density,
        )
        graph = aggregation.graph

        simulation = ForceSimulation(
            graph.nodes, graph.links, principal=self.principal, seed=self._seed
        )
        simulation.run()

        spatial = adapt_to_spatial_graph(
            graph,
            records,
            mode=self.view_mode,
            principal=self.principal,
            hop_distances=aggregation.hop_distances,
        )
        ring_positions: dict[str, Position3D] = {}
        if self.view_mode != ViewMode.GRAPH:
            ring_positions = compute_ring_positions(spatial.nodes, self.principal, self._rng)

        self.recompute_count += 1
        logger.info(
            f"Recomputed views: {len(records)} records, {len(graph.nodes)} nodes, "
            f"{len(graph.links)} links, mode={self.view_mode.value}"
        )
        return ViewSnapshot(
            aggregation=aggregation,
            graph=graph,
            spatial=spatial,
            ring_positions=ring_positions,
            bubbles=layout_bubbles(aggregation.unlocated_network),
            simulation=simulation,
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def active_panel(self) -> DetailPanel:
        if self.selected_event is not None:
            return DetailPanel.EVENT
        if self.selected_entity is not None:
            return DetailPanel.ENTITY
        if self.selected_location is not None:
            return DetailPanel.LOCATION
        return DetailPanel.NONE

    def select_entity(self, name: str | None) -> None:
        """Select an entity; clears any location and event detail."""
        self.selected_entity = name
        self.selected_location = None
        self.selected_event = None
        self.document = None

    def select_location(self, name: str | None) -> None:
        """Select a location; clears any entity and event."""
        self.selected_location = name
        self.selected_entity = None
        self.selected_event = None
        self.document = None

    def select_event(self, event: RelationshipRecord | None) -> None:
        """Show one event; a selected location stays as the parent context."""
        self.selected_event = event
        self.selected_entity = None
        self.document = None

    def clear_selection(self) -> None:
        self.selected_entity = None
        self.selected_location = None
        self.selected_event = None
        self.document = None
        self.close_bubble_map()

    @property
    def connection_groups(self) -> list[ConnectionGroup]:
        """Counterparty groups of the selected entity over the full record set."""
        if self.selected_entity is None:
            return []
        return group_connections(self.records, self.selected_entity)

    @property
    def connected_to_selected(self) -> set[str]:
        if self.selected_entity is None:
            return set()
        return connected_to(self.snapshot.graph.links, self.selected_entity)

    @property
    def selected_location_bucket(self) -> LocationBucket | None:
        if self.selected_location is None:
            return None
        return self.snapshot.aggregation.locations.get(self.selected_location)

    def search_nodes(self, query: str) -> list[GraphNode]:
        return search_nodes(self.snapshot.graph.nodes, query)

    async def search_actors(self, query: str) -> list[Actor]:
        """Actor name search; short queries and failures give no results."""
        query = query.strip()
        if len(query) < settings.actor_search_min_length:
            return []
        try:
            return await self.query_client.search_actors(query)
        except Exception as e:
            logger.error(f"Actor search failed: {e}")
            return []

    # ------------------------------------------------------------------
    # Documents and interrogation
    # ------------------------------------------------------------------

    async def open_document(self, event: RelationshipRecord) -> DocumentView:
        """Fetch a record's source document text and metadata in parallel."""
        text_result, meta_result = await asyncio.gather(
            self.query_client.fetch_document_text(event.doc_id),
            self.query_client.fetch_document(event.doc_id),
            return_exceptions=True,
        )

        if isinstance(meta_result, BaseException):
            logger.warning(f"Document metadata unavailable for {event.doc_id}: {meta_result}")
            meta_result = DocumentSummary(doc_id=event.doc_id, category="Unknown")

        if isinstance(text_result, BaseException):
            logger.error(f"Error fetching document {event.doc_id}: {text_result}")
            view = DocumentView(
                doc_id=event.doc_id,
                category=meta_result.category,
                summary=meta_result.one_sentence_summary,
                text=DOCUMENT_LOAD_FAILED,
                is_loaded=False,
            )
        else:
            view = DocumentView(
                doc_id=meta_result.doc_id,
                category=meta_result.category,
                summary=meta_result.one_sentence_summary,
                text=text_result,
            )

        if self.selected_event == event:
            self.document = view
        return view

    async def explain_document(self, event: RelationshipRecord) -> str:
        view = self.document if self.document and self.selected_event == event else None
        if view is None:
            view = await self.open_document(event)
        if not view.is_loaded:
            return DOCUMENT_FAILURE_ANSWER
        return await self.interrogator.explain_document(event, view.text)

    async def explain_entity(self, name: str | None = None) -> str:
        name = name or self.selected_entity
        if name is None:
            return await self.interrogator.explain_entity("", [])
        return await self.interrogator.explain_entity(name, records_for_entity(self.records, name))

    async def explain_event(self, event: RelationshipRecord | None = None) -> str:
        event = event or self.selected_event
        if event is None:
            raise ValueError("no event selected")
        return await self.interrogator.explain_event(event)

    async def ask(self, question: str) -> str:
        return await self.chat.ask(question, self.records)

    # ------------------------------------------------------------------
    # Bubble map
    # ------------------------------------------------------------------

    def zoom_to_person(
        self,
        name: str,
        width: float,
        height: float,
        duration: float | None = None,
    ) -> asyncio.Task | None:
        """Animate the bubble map onto a person; replaces any running animation."""
        node = next((b for b in self.snapshot.bubbles if b.name == name), None)
        if node is None:
            return None
        self.bubble_person = name
        target = self.bubble_viewport.focus_on(node, width, height)
        return self._animate_viewport(target, duration)

    def reset_bubble_view(self, duration: float | None = None) -> asyncio.Task:
        return self._animate_viewport(BubbleViewport(), duration)

    def _animate_viewport(self, target: BubbleViewport, duration: float | None) -> asyncio.Task:
        duration = duration if duration is not None else settings.bubble_zoom_duration
        start = self.bubble_viewport

        def step(progress: float) -> None:
            self.bubble_viewport = start.interpolate(target, progress)

        return self._animator.start(step, duration)

    def close_bubble_map(self) -> None:
        self._animator.cancel()
        self.bubble_person = None
        self.bubble_viewport = BubbleViewport()

    @property
    def is_animating(self) -> bool:
        return self._animator.running

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Cancel timers, animations and any fetch in flight."""
        self._debouncer.cancel()
        self._animator.cancel()
        task, self._refetch_task = self._refetch_task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        logger.debug("View controller closed")
