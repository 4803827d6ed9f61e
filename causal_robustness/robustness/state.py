"""Owned, injectable engine state.

Holds the per-variable EWMA registry and the regularization/bootstrap
configs. Each engine instance owns one ``EngineState``, so engines created
for different tenants never share smoothing state.
"""

import threading
from dataclasses import replace
from typing import Any

from pydantic import BaseModel, ValidationError

from causal_robustness.logging_config.structured import get_logger

from .errors import ConfigurationError
from .types import BootstrapConfig, EWMAFilterState, RegularizationConfig, utc_now

logger = get_logger(__name__)


def validate_alpha(alpha: float) -> float:
    """Reject smoothing factors outside (0, 1]."""
    if not 0.0 < alpha <= 1.0:
        raise ConfigurationError(f"EWMA alpha must be in (0, 1], got {alpha}")
    return float(alpha)


def _apply_update(config: BaseModel, changes: dict[str, Any]) -> BaseModel:
    """Validate a partial update against the config's model."""
    try:
        return type(config).model_validate({**config.model_dump(), **changes})
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid {type(config).__name__} update: {e.errors(include_url=False)}"
        ) from e


class EngineState:
    """EWMA filter registry plus process configs for one engine."""

    def __init__(
        self,
        regularization_config: RegularizationConfig | None = None,
        bootstrap_config: BootstrapConfig | None = None,
    ) -> None:
        self._regularization_config = regularization_config or RegularizationConfig()
        self._bootstrap_config = bootstrap_config or BootstrapConfig()
        self._filters: dict[str, EWMAFilterState] = {}
        self._variable_locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()  # Protects _filters and _variable_locks

    # ─── Configs ────────────────────────────────────────────────────────────

    @property
    def regularization_config(self) -> RegularizationConfig:
        return self._regularization_config

    @property
    def bootstrap_config(self) -> BootstrapConfig:
        return self._bootstrap_config

    def update_regularization_config(self, **changes: Any) -> RegularizationConfig:
        """Merge ``changes`` into the regularization config, validating eagerly."""
        self._regularization_config = _apply_update(self._regularization_config, changes)
        logger.info(
            "regularization_config_updated",
            **self._regularization_config.model_dump(),
        )
        return self._regularization_config

    def update_bootstrap_config(self, **changes: Any) -> BootstrapConfig:
        """Merge ``changes`` into the bootstrap config, validating eagerly."""
        self._bootstrap_config = _apply_update(self._bootstrap_config, changes)
        logger.info("bootstrap_config_updated", **self._bootstrap_config.model_dump())
        return self._bootstrap_config

    # ─── EWMA registry ──────────────────────────────────────────────────────

    def variable_lock(self, variable: str) -> threading.Lock:
        """Lock serialising updates to one variable's filter state.

        Locks are kept for the lifetime of the state, even after
        ``remove_filter``, so the map is bounded by the set of variable names
        ever seen. A caller still waiting on a lock keeps excluding later
        callers of the same variable.
        """
        with self._registry_lock:
            lock = self._variable_locks.get(variable)
            if lock is None:
                lock = self._variable_locks[variable] = threading.Lock()
            return lock

    def get_filter(self, variable: str) -> EWMAFilterState | None:
        with self._registry_lock:
            return self._filters.get(variable)

    def ensure_filter(self, variable: str, alpha: float) -> EWMAFilterState:
        """Return the variable's state, creating it on first use."""
        with self._registry_lock:
            state = self._filters.get(variable)
            if state is None:
                state = self._filters[variable] = EWMAFilterState(alpha=alpha)
            return state

    def add_filter(self, variable: str, alpha: float) -> EWMAFilterState:
        """Register (or reset) a filter for ``variable``."""
        state = EWMAFilterState(alpha=validate_alpha(alpha), last_updated=utc_now())
        with self.variable_lock(variable):
            with self._registry_lock:
                self._filters[variable] = state
        logger.info("ewma_filter_added", variable=variable, alpha=alpha)
        return state

    def remove_filter(self, variable: str) -> bool:
        """Drop a variable's filter state. Returns False if none existed."""
        with self.variable_lock(variable):
            with self._registry_lock:
                removed = self._filters.pop(variable, None) is not None
        if removed:
            logger.info("ewma_filter_removed", variable=variable)
        return removed

    def filters(self) -> dict[str, EWMAFilterState]:
        """Snapshot copies of every registered filter."""
        with self._registry_lock:
            return {name: replace(state) for name, state in self._filters.items()}
