"""CHIP-8 instruction decoding.

An instruction word ``0xFXYN`` splits into a family nibble F, register
selectors X and Y, and the immediates N, NN (low byte) and NNN (low 12 bits).
"""

from chex import dataclass


@dataclass(frozen=True)
class DecodedInstruction:
    """Instruction word with every operand field extracted."""
    raw: int
    family: int
    x: int
    y: int
    n: int
    nn: int
    nnn: int


def decode(instruction: int) -> DecodedInstruction:
    """Split a 16-bit instruction word into its fields."""
    return DecodedInstruction(
        raw=instruction,
        family=(instruction >> 12) & 0xF,
        x=(instruction >> 8) & 0xF,
        y=(instruction >> 4) & 0xF,
        n=instruction & 0xF,
        nn=instruction & 0xFF,
        nnn=instruction & 0xFFF,
    )
