"""Known cores and the currently active one."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from gcode_knet.gcode.core_config import CoreConfig

logger = logging.getLogger(__name__)


@dataclass
class MachineState:
    """Mutable per-run machine state.

    Attributes
    ----------
    configs : dict[str, CoreConfig]
        Core settings keyed by core id.
    active_core : str | None
        Id of the core that ``X`` moves are currently routed to.  ``None``
        until a canonical ``X`` core is registered or a tool change names
        a known core.
    """

    configs: dict[str, CoreConfig] = field(default_factory=dict)
    active_core: str | None = None

    def register(self, config: CoreConfig) -> None:
        """Add or replace a core.

        The first canonical ``X`` core registered while no core is active
        becomes the active one.
        """
        if config.core_id in self.configs:
            logger.debug("Replacing config for core %s", config.core_id)
        self.configs[config.core_id] = config
        logger.info(
            "Loaded config for core %s: axis %s, park %s, feed %s",
            config.core_id, config.axis_letter, config.park, config.feed,
        )

        if self.active_core is None and config.is_canonical:
            self.active_core = config.core_id
            logger.info("Default active core set to %s", self.active_core)

    def is_known(self, core_id: str) -> bool:
        return core_id in self.configs

    def active_config(self) -> CoreConfig | None:
        """Config of the active core, ``None`` if unset or unknown."""
        if self.active_core is None:
            return None
        return self.configs.get(self.active_core)

    def activate(self, core_id: str) -> CoreConfig | None:
        """Make *core_id* the active core.

        Returns the config of the core being released, or ``None`` when no
        hand-off happens (nothing active, or *core_id* already active).

        Raises
        ------
        KeyError
            If *core_id* is not a known core.
        """
        if core_id not in self.configs:
            raise KeyError(core_id)

        outgoing = None
        if self.active_core and self.active_core != core_id:
            outgoing = self.configs.get(self.active_core)

        self.active_core = core_id
        return outgoing
