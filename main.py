"""
Run a CHIP-8 ROM in a pygame window, or headless for a fixed duration.

    python main.py rom=games/pong.ch8
    python main.py rom=games/pong.ch8 quirks.legacy_shift=false clock_hz=700
    python main.py rom=tests/ibm.ch8 headless=true seconds=2
"""

import hydra
from omegaconf import DictConfig, OmegaConf

from chipvm import EmulatorError, Machine, Quirks
from chipvm.logging import EmulatorLogger
from chipvm.rendering import display_to_text


def run_headless(cfg, quirks: Quirks, logger: EmulatorLogger) -> None:
    with open(cfg["rom"], 'rb') as f:
        rom = f.read()

    machine = Machine(
        rom,
        quirks=quirks,
        instruction_frequency=cfg["clock_hz"],
        stack_size=cfg["stack_size"],
        seed=cfg["seed"],
        logger=logger,
    )
    try:
        executed = machine.run_for(cfg["seconds"], progress=cfg["progress"])
        logger.info(f"Executed {executed} instructions in {cfg['seconds']}s of emulated time")
    except EmulatorError as e:
        logger.error(f"Stopped after {machine.steps} instructions: {e}")
    print(display_to_text(machine.framebuffer))


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    cfg = OmegaConf.to_container(cfg, resolve=True, throw_on_missing=True)

    logger = EmulatorLogger(log_level=cfg["log_level"], trace=cfg["trace"])
    quirks = Quirks(**cfg["quirks"])

    if cfg["headless"]:
        run_headless(cfg, quirks, logger)
        return

    from chipvm.frontend import run_emulator

    run_emulator(
        cfg["rom"],
        quirks=quirks,
        instruction_frequency=cfg["clock_hz"],
        stack_size=cfg["stack_size"],
        seed=cfg["seed"],
        scale=cfg["scale"],
        color_scheme=cfg["color_scheme"],
        logger=logger,
    )


if __name__ == "__main__":
    main()
