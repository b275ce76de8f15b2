"""Named history filter presets saved in the local store."""

import uuid
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from ..config.defaults import FilterParams
from ..errors import PersistenceError
from ..logging.config import get_state_logger
from ..persistence.local_store import LocalStore
from .filters import DEFAULT_FILTERS, FilterState, parse_filters, to_query

logger = get_state_logger(__name__)

PRESETS_KEY = "mindful-trader-history-presets"


@dataclass(frozen=True)
class FilterPreset:
    id: str
    name: str
    filters: str        # query string without page and view
    created_at: str     # ISO timestamp

    def to_filter_state(self) -> FilterState:
        return parse_filters(self.filters)


class FilterPresetStore:
    """
    Saved filter combinations for the trade history.

    At most ``max_presets`` are kept; saving beyond that drops the oldest.
    Write failures are logged and the in-memory list stays authoritative
    for the rest of the session.
    """

    def __init__(
        self,
        store: LocalStore,
        key: str = PRESETS_KEY,
        config: Optional[FilterParams] = None
    ):
        self.store = store
        self.key = key
        self.config = config or FilterParams()
        self.logger = logger
        self._presets = self._load()

    def _load(self) -> list[FilterPreset]:
        raw = self.store.get(self.key, [])
        presets = []
        if not isinstance(raw, list):
            self.logger.warning("Ignoring malformed presets entry", key=self.key)
            return presets

        for entry in raw:
            try:
                presets.append(FilterPreset(
                    id=entry["id"],
                    name=entry["name"],
                    filters=entry.get("filters", ""),
                    created_at=entry["created_at"],
                ))
            except (KeyError, TypeError, AttributeError):
                self.logger.warning("Skipping malformed preset", entry=entry)
        return presets

    def _persist(self) -> None:
        try:
            self.store.set(self.key, [asdict(p) for p in self._presets])
        except PersistenceError as e:
            self.logger.error("Failed to save presets", error=str(e))

    def _validate_name(self, name: str) -> str:
        low = self.config.preset_name_min_length
        high = self.config.preset_name_max_length
        if not name or len(name) < low or len(name) > high:
            raise ValueError(f"Preset name must be between {low} and {high} characters")
        return name

    @property
    def presets(self) -> list[FilterPreset]:
        """All presets, newest first."""
        return sorted(self._presets, key=lambda p: p.created_at, reverse=True)

    @property
    def can_save_more(self) -> bool:
        return len(self._presets) < self.config.max_presets

    def save_preset(self, name: str, filters: FilterState) -> FilterPreset:
        """
        Save the current filters under a name.

        Page and view mode are not part of a preset.

        Raises:
            ValueError: If the name is too short or too long
        """
        self._validate_name(name)

        preset = FilterPreset(
            id=str(uuid.uuid4()),
            name=name,
            filters=to_query(replace(filters, page=DEFAULT_FILTERS.page, view=DEFAULT_FILTERS.view)),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self._presets = ([preset] + self._presets)[:self.config.max_presets]
        self._persist()

        self.logger.info("Preset saved", preset_id=preset.id, name=name)
        return preset

    def load_preset(self, preset_id: str) -> Optional[FilterPreset]:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        return None

    def delete_preset(self, preset_id: str) -> None:
        self._presets = [p for p in self._presets if p.id != preset_id]
        self._persist()
        self.logger.info("Preset deleted", preset_id=preset_id)

    def rename_preset(self, preset_id: str, name: str) -> None:
        """
        Raises:
            ValueError: If the name is too short or too long
        """
        self._validate_name(name)
        self._presets = [
            replace(p, name=name) if p.id == preset_id else p
            for p in self._presets
        ]
        self._persist()
