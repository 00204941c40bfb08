from __future__ import annotations

import argparse
import io
import json
import math
import sys
import wave
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tv_custom_sound.assets import to_data_uri  # noqa: E402

SAMPLE_RATE = 22050


def _clamp(v: float) -> float:
    return max(-1.0, min(1.0, v))


def wav_bytes(samples: list[float], sample_rate: int = SAMPLE_RATE) -> bytes:
    buf = io.BytesIO()
    with wave.open(buf, "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        pcm = bytearray()
        for s in samples:
            x = int(_clamp(s) * 32767)
            pcm += int(x).to_bytes(2, byteorder="little", signed=True)
        wf.writeframes(pcm)
    return buf.getvalue()


def ding(freq: float, duration_s: float = 0.25, amp: float = 0.6) -> list[float]:
    n = int(duration_s * SAMPLE_RATE)
    return [
        amp * math.exp(-10.0 * (i / SAMPLE_RATE)) * math.sin(2.0 * math.pi * freq * (i / SAMPLE_RATE))
        for i in range(n)
    ]


def two_tone_chime(freq_a: float, freq_b: float, duration_s: float = 0.4, amp: float = 0.5) -> list[float]:
    n = int(duration_s * SAMPLE_RATE)
    half = n // 2
    out: list[float] = []
    for i in range(n):
        t = i / SAMPLE_RATE
        freq = freq_a if i < half else freq_b
        env = math.exp(-6.0 * (t if i < half else t - half / SAMPLE_RATE))
        out.append(amp * env * math.sin(2.0 * math.pi * freq * t))
    return out


DEMO_SOUNDS = {
    # Stand-ins for the sounds a platform plays.
    "platform_trade.wav": lambda: ding(880.0),
    "platform_alert.wav": lambda: two_tone_chime(660.0, 990.0),
    "platform_other.wav": lambda: ding(330.0, 0.3),
    # Stand-ins for the user's own replacements.
    "custom_trade.wav": lambda: ding(523.25, 0.35),
    "custom_alert.wav": lambda: two_tone_chime(392.0, 587.33, 0.5),
}


def build_demo(root: Path) -> dict[str, str]:
    """Write the demo WAVs under ``root``; return platform name -> data URI."""
    root.mkdir(parents=True, exist_ok=True)
    sources: dict[str, str] = {}
    for name, make in DEMO_SOUNDS.items():
        payload = wav_bytes(make())
        (root / name).write_bytes(payload)
        if name.startswith("platform_"):
            sources[name] = to_data_uri(payload, "audio/wav")
    return sources


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate deterministic demo sounds for routing/tagging demos.")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("examples") / "demo_sounds",
        help="Output folder (default: examples/demo_sounds)",
    )
    args = parser.parse_args()

    output_root = args.output.resolve()
    sources = build_demo(output_root)
    # One data: URI per line, ready for `tv-custom-sound route`.
    (output_root / "sources.txt").write_text("\n".join(sources.values()) + "\n", encoding="utf-8")
    (output_root / "manifest.json").write_text(json.dumps(sorted(DEMO_SOUNDS), indent=2), encoding="utf-8")
    print(f"Generated {len(DEMO_SOUNDS)} WAV files under {output_root}")
    print(f"Wrote sources: {output_root / 'sources.txt'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
