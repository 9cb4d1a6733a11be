"""Draw the sixteen font glyphs headless and print the screen."""

from chipvm import Machine
from chipvm.interfaces import RecordingDisplay
from chipvm.logging import EmulatorLogger
from chipvm.rendering import display_to_text


def glyph_program() -> bytes:
    words = [0x6000, 0x6101, 0x6201]  # V0 = digit, V1 = x, V2 = y
    # loop at 0x206: I = glyph(V0); draw; advance x and digit; wrap row after 8
    words += [
        0xF029,  # 0x206
        0xD125,  # 0x208
        0x7108,  # 0x20A
        0x7001,  # 0x20C
        0x3008,  # 0x20E  digit 8 starts the second row
        0x1216,  # 0x210
        0x6101,  # 0x212  x = 1
        0x7206,  # 0x214  y += 6
        0x4010,  # 0x216  stop after digit F
        0x121C,  # 0x218
        0x1206,  # 0x21A
        0x121C,  # 0x21C  spin
    ]
    return b"".join(word.to_bytes(2, "big") for word in words)


if __name__ == "__main__":
    logger = EmulatorLogger(log_level="DEBUG", trace=True)
    display = RecordingDisplay()
    machine = Machine(glyph_program(), display=display, logger=logger)

    machine.run_for(1.0, progress=True)

    print(display_to_text(machine.framebuffer))
    print(f"{len(display.lit)} pixels lit after {machine.steps} instructions")
