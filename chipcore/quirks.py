"""Compatibility toggles for historically divergent CHIP-8 behaviours."""

from flax.struct import dataclass


@dataclass(frozen=True)
class Quirks:
    """Interpreter quirks, fixed for the lifetime of an emulator state.

    Attributes:
        vf_reset: 8XY1/8XY2/8XY3 also zero VF (original COSMAC VIP artifact)
        amiga_behaviour: FX1E sets VF when I moves past 0x0FFF
        modern_shift_behaviour: 8XY6/8XYE shift VX in place instead of VY
        modern_str_ld_behaviour: FX55/FX65 leave I unchanged
    """
    vf_reset: bool = False
    amiga_behaviour: bool = False
    modern_shift_behaviour: bool = False
    modern_str_ld_behaviour: bool = False

    @classmethod
    def from_preset(cls, name: str) -> "Quirks":
        """Get a named quirk preset ("cosmac", "modern", "amiga")."""
        if name not in QUIRK_PRESETS:
            raise ValueError(
                f"Unknown quirk preset '{name}'. Available: {list(QUIRK_PRESETS.keys())}"
            )
        return QUIRK_PRESETS[name]


QUIRK_PRESETS = {
    "cosmac": Quirks(vf_reset=True),
    "modern": Quirks(modern_shift_behaviour=True, modern_str_ld_behaviour=True),
    "amiga": Quirks(
        amiga_behaviour=True,
        modern_shift_behaviour=True,
        modern_str_ld_behaviour=True,
    ),
}
