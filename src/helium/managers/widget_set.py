"""
Widget-set store: the authoritative list of widget sets for this process.

Callers always hold copies. Every mutation re-locates the live set (and
widget) by identity before changing it, and quietly does nothing when the
target has disappeared in the meantime.
"""

import copy
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Union

from ..config.codec import ConfigCodec
from ..config.gateway import DEFAULT_PREFERENCES_PATH, PersistenceGateway
from ..config.models import EDITABLE_SET_ATTRIBUTES, Anchor, WidgetInstance, WidgetSet
from ..platforms.base import OverlayHost
from ..platforms.notifier import NullReloadNotifier, ReloadNotifier
from ..utils.errors import safe_execute
from ..widgets.base import WidgetModule
from .widget import WidgetRegistry, registry

logger = logging.getLogger(__name__)

WIDGET_PROPERTIES_KEY = "widgetProperties"


class WidgetSetStore:
    """
    Owns the in-memory widget sets and keeps the persisted copy in sync.

    Responsibilities:
    - Load and save the full list through the codec and gateway
    - Widget-level edits (add, remove, move, reconfigure)
    - Set-level edits (add, remove, create, edit)
    - Signal the renderer after every save

    Every mutating method takes ``auto_save`` (default True). Batch edits pass
    False and call ``save()`` once afterwards; there is no implicit batching.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        notifier: Optional[ReloadNotifier] = None,
        overlay_host: Optional[OverlayHost] = None,
        codec: Optional[ConfigCodec] = None,
        widget_registry: Optional[WidgetRegistry] = None,
        path: str = DEFAULT_PREFERENCES_PATH,
    ):
        """
        Initialize the store and load the persisted widget sets.

        Args:
            gateway: Preferences medium
            notifier: Reload signal sent after each save
            overlay_host: Overlay process control, restarted on set creation
            codec: Persisted-form codec
            widget_registry: Widget option classes used to minimize configs
            path: Namespaced preferences path
        """
        self.gateway = gateway
        self.notifier = notifier or NullReloadNotifier()
        self.overlay_host = overlay_host
        self.codec = codec or ConfigCodec()
        self.widget_registry = widget_registry or registry
        self.path = path
        self._widget_sets: List[WidgetSet] = []
        # Each public call re-locates and mutates under this lock
        self._lock = threading.RLock()
        self.load()

    @property
    def widget_sets(self) -> List[WidgetSet]:
        """Copies of all widget sets in display order."""
        with self._lock:
            return copy.deepcopy(self._widget_sets)

    def __len__(self) -> int:
        with self._lock:
            return len(self._widget_sets)

    def load(self) -> List[WidgetSet]:
        """
        Replace the in-memory list with the persisted widget sets.

        Returns:
            Copies of the loaded sets
        """
        raw = self.gateway.get(self.path, WIDGET_PROPERTIES_KEY)
        with self._lock:
            self._widget_sets = self.codec.decode(raw)
            logger.info(f"Loaded {len(self._widget_sets)} widget set(s) from {self.path}")
            return copy.deepcopy(self._widget_sets)

    def save(self) -> None:
        """
        Persist all widget sets and notify the renderer.

        An empty list deletes the stored key instead of storing an empty one.
        The renderer is notified even when nothing changed.

        Raises:
            PersistenceError: If the preferences medium cannot be written
        """
        with self._lock:
            encoded = self.codec.encode(self._widget_sets)
            if encoded:
                self.gateway.set(self.path, WIDGET_PROPERTIES_KEY, encoded)
            else:
                self.gateway.delete(self.path, WIDGET_PROPERTIES_KEY)

            for widget_set in self._widget_sets:
                for widget in widget_set.widget_ids:
                    widget.modified = False

            logger.info(f"Saved {len(encoded)} widget set(s) to {self.path}")

        self.notifier.notify()

    def _find_set(self, widget_set: WidgetSet) -> Optional[WidgetSet]:
        """Live set with the same identity, or None."""
        for live in self._widget_sets:
            if live == widget_set:
                return live
        logger.debug(f"Widget set {widget_set.title!r} ({widget_set.identity}) no longer exists")
        return None

    def get_updated_widget_set(self, widget_set: WidgetSet) -> Optional[WidgetSet]:
        """
        Fresh copy of a widget set, for callers holding a stale one.

        Returns:
            Current copy, or None if the set has been removed
        """
        with self._lock:
            live = self._find_set(widget_set)
            return copy.deepcopy(live) if live is not None else None

    def add_widget(
        self,
        widget_set: WidgetSet,
        module: Union[WidgetModule, int],
        config: Optional[Dict[str, Any]] = None,
        auto_save: bool = True,
    ) -> WidgetInstance:
        """
        Append a new widget to a set.

        Args:
            widget_set: Target set (any copy)
            module: Widget kind
            config: Initial options (default: none, all defaults apply)
            auto_save: Persist immediately

        Returns:
            Copy of the new widget, usable right away for further edits
        """
        module = WidgetModule(module)
        widget = WidgetInstance(
            module=module,
            config=self.widget_registry.normalize_config(module, copy.deepcopy(config)),
        )

        with self._lock:
            live = self._find_set(widget_set)
            if live is None:
                return copy.deepcopy(widget)

            live.widget_ids.append(widget)
            logger.debug(f"Added {module.name} widget to {live.title!r}")
            if auto_save:
                self.save()
            return copy.deepcopy(widget)

    def remove_widget(
        self,
        widget_set: WidgetSet,
        target: Union[int, WidgetInstance],
        auto_save: bool = True,
    ) -> None:
        """
        Remove a widget from a set, by position or by widget.

        Args:
            widget_set: Target set (any copy)
            target: Zero-based position, or the widget itself
            auto_save: Persist immediately
        """
        with self._lock:
            live = self._find_set(widget_set)
            if live is None:
                return

            if isinstance(target, WidgetInstance):
                index = live.index_of(target)
                if index is None:
                    logger.debug(f"Widget {target.identity} not in {live.title!r}")
                    return
            else:
                index = target

            if not 0 <= index < len(live.widget_ids):
                logger.warning(f"No widget at position {index} in {live.title!r}")
                return

            removed = live.widget_ids.pop(index)
            logger.debug(f"Removed {removed.module.name} widget from {live.title!r}")
            if auto_save:
                self.save()

    def move_widget(
        self, widget_set: WidgetSet, from_indices: Iterable[int], to_index: int
    ) -> None:
        """
        Reorder widgets within a set.

        The widgets at ``from_indices`` keep their relative order and are
        inserted before the widget that was at ``to_index`` (``len`` moves
        them to the end). Never saves: reordering stays a draft until an
        explicit ``save()``.

        Args:
            widget_set: Target set (any copy)
            from_indices: Positions of the widgets to move
            to_index: Destination position in the original ordering
        """
        with self._lock:
            live = self._find_set(widget_set)
            if live is None:
                return

            count = len(live.widget_ids)
            sources = sorted({i for i in from_indices if 0 <= i < count})
            if not sources:
                return
            to_index = max(0, min(to_index, count))

            moving = [live.widget_ids[i] for i in sources]
            remaining = [w for i, w in enumerate(live.widget_ids) if i not in sources]
            insert_at = to_index - sum(1 for i in sources if i < to_index)
            live.widget_ids = remaining[:insert_at] + moving + remaining[insert_at:]

    def update_widget_config(
        self,
        widget_set: WidgetSet,
        widget: WidgetInstance,
        new_widget: WidgetInstance,
        auto_save: bool = True,
    ) -> None:
        """
        Replace a widget's options with those of ``new_widget``.

        Only the config map changes; module and identity stay. Empty text
        options and None values are dropped before storing.

        Args:
            widget_set: Set holding the widget (any copy)
            widget: Widget to update (any copy)
            new_widget: Carrier of the new config
            auto_save: Persist immediately
        """
        with self._lock:
            live = self._find_set(widget_set)
            if live is None:
                return

            index = live.index_of(widget)
            if index is None:
                logger.debug(f"Widget {widget.identity} not in {live.title!r}")
                return

            target = live.widget_ids[index]
            target.config = self.widget_registry.normalize_config(
                target.module, copy.deepcopy(new_widget.config)
            )
            if auto_save:
                self.save()

    def add_widget_set(self, widget_set: WidgetSet, auto_save: bool = True) -> None:
        """
        Append a widget set.

        A set whose identity is already present is not added twice.
        """
        with self._lock:
            if any(live == widget_set for live in self._widget_sets):
                logger.warning(f"Widget set {widget_set.title!r} already exists, not adding it")
                return

            self._widget_sets.append(copy.deepcopy(widget_set))
            logger.info(f"Added widget set {widget_set.title!r}")
            if auto_save:
                self.save()

    def remove_widget_set(self, widget_set: WidgetSet, auto_save: bool = True) -> None:
        """Remove a widget set (no-op if it is already gone)."""
        with self._lock:
            live = self._find_set(widget_set)
            if live is None:
                return

            self._widget_sets.remove(live)
            logger.info(f"Removed widget set {live.title!r}")
            if auto_save:
                self.save()

    def create_widget_set(
        self, title: str, anchor: Union[Anchor, int] = Anchor.LEFT, auto_save: bool = True
    ) -> WidgetSet:
        """
        Create a widget set with the standard defaults and append it.

        Sets anchored in the center start without a horizontal offset; corner
        sets start 10 points in. If the overlay is running it is restarted so
        the new set shows up.

        Args:
            title: Set title
            anchor: Horizontal anchor
            auto_save: Persist immediately

        Returns:
            Copy of the created set
        """
        offset_x = 0.0 if int(anchor) == Anchor.CENTER else 10.0
        widget_set = WidgetSet(
            title=title,
            anchor=int(anchor),
            offset_px=offset_x,
            offset_lx=offset_x,
            auto_resizes=True,
        )
        self.add_widget_set(widget_set, auto_save=auto_save)

        if self.overlay_host is not None:
            safe_execute(self.overlay_host.restart, default=False, description="Overlay restart")

        return copy.deepcopy(widget_set)

    def edit_widget_set(
        self, widget_set: WidgetSet, new_details: WidgetSet, auto_save: bool = True
    ) -> None:
        """
        Overwrite every attribute of a set from ``new_details``.

        Widgets are left untouched; use the widget-level methods for those.

        Args:
            widget_set: Set to edit (any copy)
            new_details: Carrier of the new attribute values
            auto_save: Persist immediately
        """
        with self._lock:
            live = self._find_set(widget_set)
            if live is None:
                return

            for attribute in EDITABLE_SET_ATTRIBUTES:
                setattr(live, attribute, copy.deepcopy(getattr(new_details, attribute)))
            logger.debug(f"Edited widget set {live.title!r}")
            if auto_save:
                self.save()
