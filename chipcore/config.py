"""Interpreter configuration."""

from typing import Any, Mapping

import jax
from flax.struct import dataclass, field

from chipcore.constants import INSTRUCTIONS_PER_TICK, TICKS_PER_SECOND
from chipcore.quirks import Quirks
from chipcore.state import EmulatorState, create_state


@dataclass(frozen=True)
class InterpreterConfig:
    """Host-level pacing parameters plus the quirks baked into new states.

    Attributes:
        instructions_per_tick: Instructions executed per tick
        ticks_per_second: Host tick cadence; timers decay once per tick
        quirks: Compatibility toggles for new emulator states
        seed: Seed for the CXNN random number generator
    """
    instructions_per_tick: int = field(pytree_node=False, default=INSTRUCTIONS_PER_TICK)
    ticks_per_second: int = field(pytree_node=False, default=TICKS_PER_SECOND)
    quirks: Quirks = field(pytree_node=False, default=Quirks())
    seed: int = field(pytree_node=False, default=0)

    def __post_init__(self):
        if self.instructions_per_tick < 1:
            raise ValueError(f"instructions_per_tick must be positive, got {self.instructions_per_tick}")
        if self.ticks_per_second < 1:
            raise ValueError(f"ticks_per_second must be positive, got {self.ticks_per_second}")

    @property
    def instruction_frequency(self) -> int:
        """Effective CPU speed in instructions per second."""
        return self.instructions_per_tick * self.ticks_per_second

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any]) -> "InterpreterConfig":
        """Build a config from a plain mapping (e.g. an OmegaConf container).

        `quirks` may be a preset name or a mapping of quirk toggles; keys not
        belonging to the interpreter are ignored.
        """
        quirks = cfg.get("quirks")
        if quirks is None:
            quirks = Quirks()
        elif isinstance(quirks, str):
            quirks = Quirks.from_preset(quirks)
        elif isinstance(quirks, Mapping):
            unknown = set(quirks) - set(Quirks.__dataclass_fields__)
            if unknown:
                raise ValueError(f"Unknown quirks: {sorted(unknown)}")
            quirks = Quirks(**{k: bool(v) for k, v in quirks.items()})
        elif not isinstance(quirks, Quirks):
            raise ValueError(f"Cannot build quirks from {quirks!r}")

        return cls(
            instructions_per_tick=int(cfg.get("instructions_per_tick", INSTRUCTIONS_PER_TICK)),
            ticks_per_second=int(cfg.get("ticks_per_second", TICKS_PER_SECOND)),
            quirks=quirks,
            seed=int(cfg.get("seed", 0)),
        )

    def as_dict(self) -> dict:
        return {
            "instructions_per_tick": self.instructions_per_tick,
            "ticks_per_second": self.ticks_per_second,
            "quirks": self.quirks,
            "seed": self.seed,
        }

    def create_state(self) -> EmulatorState:
        """Create a fresh emulator state using this configuration."""
        return create_state(jax.random.PRNGKey(self.seed), quirks=self.quirks)
