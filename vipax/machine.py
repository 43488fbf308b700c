"""Stateful driver-side wrapper around the functional interpreter core."""

from functools import partial
from typing import Callable, Optional

import jax
import jax.numpy as jnp
import numpy as np

from vipax.state import EmulatorState, create_state, toggle_sound, press_key, release_key, set_keypad
from vipax.emulator import StepResult, step, tick_timers, load_program, load_rom
from vipax.constants import NUM_KEYS
from vipax.logging import ConsoleLogger, scan_with_progress


def run_step(state, _):
    return step(state)


@partial(jax.jit, static_argnums=1)
def run_n_steps(state: EmulatorState, n: int) -> tuple[EmulatorState, StepResult]:
    """Run ``n`` steps, returning the final state and the stacked step results."""
    return jax.lax.scan(run_step, state, length=n)


def run_steps(state: EmulatorState, n: int, progress: bool = False, **tqdm_kwargs):
    """Run ``n`` steps, optionally with a progress bar.

    Returns:
        Tuple of the final state and a ``StepResult`` whose fields have a
        leading axis of length ``n``.
    """
    if not progress:
        return run_n_steps(state, n)

    @scan_with_progress(n, **tqdm_kwargs)
    def body(state, _):
        return step(state)

    return jax.jit(lambda state: jax.lax.scan(body, state, jnp.arange(n)))(state)


def _check_key(key: int):
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key must be in [0, {NUM_KEYS}), got {key}")


class Chip8:
    """CHIP-8 machine with mutable state, for hosts that drive it in a loop.

    Wraps an ``EmulatorState`` and a jitted ``step``. The host writes keys
    between steps, reads ``framebuffer`` after them, and receives a call to
    ``on_beep(audible)`` each time the sound timer runs out.
    """

    def __init__(
        self,
        rng: Optional[jax.random.PRNGKey] = None,
        wrap_sprites: bool = True,
        decay_timers: bool = True,
        on_beep: Optional[Callable[[bool], None]] = None,
        log_level: str = "WARNING",
        logger: Optional[ConsoleLogger] = None,
    ):
        """Create a machine in its reset state.

        Args:
            rng: JAX random key for CXNN; defaults to ``PRNGKey(0)``
            wrap_sprites: Wrap sprites at the screen edges instead of clipping
            decay_timers: Tick timers once per step; disable to drive ``tick``
                from the host's own 60 Hz clock
            on_beep: Called with the sound-enabled flag when a beep fires
            log_level: Level for the default console logger
            logger: Logger to use instead of the default one
        """
        self.rng = jax.random.PRNGKey(0) if rng is None else rng
        self.wrap_sprites = wrap_sprites
        self.decay_timers = decay_timers
        self.on_beep = on_beep
        self.logger = logger or ConsoleLogger(name="Chip8", log_level=log_level)
        self._step = jax.jit(step)
        self.state = None
        self.reset()

    def reset(self):
        """Zero all machine state and reinstall the font set."""
        self.state = create_state(self.rng, wrap_sprites=self.wrap_sprites, decay_timers=self.decay_timers)
        self.logger.debug("Machine reset")

    def load(self, program: bytes):
        """Copy a program to 0x200. Raises ``ProgramTooLargeError`` and keeps state on failure."""
        self.state = load_program(self.state, program)
        self.logger.info(f"Loaded program ({len(program)} bytes)")

    def load_rom(self, path: str):
        """Load a program from a file. Raises ``ProgramReadError`` if unreadable."""
        self.state = load_rom(self.state, path)
        self.logger.info(f"Loaded program from {path}")

    def step(self) -> StepResult:
        """Run one cycle and return its result; faults are reported, not raised."""
        self.state, result = self._step(self.state)
        if self.on_beep is not None and bool(result.beep):
            self.on_beep(bool(result.audible))
        return result

    def run(self, n: int, progress: bool = False) -> StepResult:
        """Run ``n`` cycles at once. ``on_beep`` fires once per beep, after the batch."""
        self.state, results = run_steps(self.state, n, progress=progress)
        if self.on_beep is not None:
            for beep, audible in zip(np.asarray(results.beep), np.asarray(results.audible)):
                if beep:
                    self.on_beep(bool(audible))
        return results

    def tick(self) -> bool:
        """Tick the timers once, for hosts running with ``decay_timers=False``."""
        self.state, beep = tick_timers(self.state)
        beep = bool(beep)
        if beep and self.on_beep is not None:
            self.on_beep(bool(self.state.sound_enabled))
        return beep

    def toggle_sound(self):
        self.state = toggle_sound(self.state)

    @property
    def sound_enabled(self) -> bool:
        return bool(self.state.sound_enabled)

    def press_key(self, key: int):
        _check_key(key)
        self.state = press_key(self.state, key)

    def release_key(self, key: int):
        _check_key(key)
        self.state = release_key(self.state, key)

    def set_keys(self, keys):
        self.state = set_keypad(self.state, keys)

    @property
    def framebuffer(self) -> np.ndarray:
        """Copy of the 64x32 display as 0/1 bytes, indexed ``[x, y]``."""
        return np.array(self.state.display, dtype=np.uint8)
