"""Run a CHIP-8 program headless and print the final screen."""

import sys
import time

import jax
import numpy as np

from vipax import create_state, load_rom, raise_for_error, run_steps


def print_display(display):
    for row in np.asarray(display).T:
        print("".join("#" if pixel else "." for pixel in row))


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python examples/example.py program.ch8 [steps]")
        sys.exit(1)

    num_steps = int(sys.argv[2]) if len(sys.argv) > 2 else 5000
    state = load_rom(create_state(), sys.argv[1])

    start = time.time()
    final_state, results = jax.block_until_ready(run_steps(state, num_steps, progress=True))
    end = time.time()

    print(f"Ran {num_steps} steps in {end - start:.2f}s (including compilation)")
    print(f"Beeps: {int(np.sum(results.beep))}")
    raise_for_error(results)
    print_display(final_state.display)
