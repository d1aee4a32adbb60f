"""
ffmpeg filter graphs for phase GIFs.

Graphs are built as data (stages with named options, grouped into
labelled chains) and only turned into ffmpeg's text syntax by
FilterGraph.render(). That keeps the construction logic testable: tests
can ask "is there a palettegen stage?" instead of matching strings.

Two variants:
- Standard: fps -> scale -> palettegen -> paletteuse. Without the
  palette pass GIFs come out visibly banded.
- Motion-highlighted: the scaled stream is split, one branch becomes a
  frame-difference mask recoloured to a highlight colour, and that layer
  is composited back over the original before the palette pass. This is
  a visual cue for "what moved", not ball tracking.
"""

from dataclasses import dataclass, field
from typing import Union

OptionValue = Union[str, int, float]

PALETTE_COLORS = 256
SCALE_FLAGS = "lanczos"
DITHER_MODE = "floyd_steinberg"

# Shapes the difference image: small changes go to black, real motion to white
MOTION_CURVE = "0/0 0.1/0 0.3/1 1/1"
MOTION_KEY_SIMILARITY = 0.3
MOTION_KEY_BLEND = 0.1


# ---------------------------------------------------------------------------
# Graph model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FilterStage:
    """A single ffmpeg filter with its options, e.g. scale=w=320:h=-1."""
    name: str
    options: tuple[tuple[str, OptionValue], ...] = ()

    @classmethod
    def of(cls, name: str, **options: OptionValue) -> "FilterStage":
        return cls(name=name, options=tuple(options.items()))

    def option(self, key: str) -> OptionValue:
        return dict(self.options)[key]

    def render(self) -> str:
        if not self.options:
            return self.name
        rendered = ":".join(f"{key}={_render_value(value)}" for key, value in self.options)
        return f"{self.name}={rendered}"


@dataclass(frozen=True)
class FilterChain:
    """Stages run in sequence, with optional input and output pad labels."""
    stages: tuple[FilterStage, ...]
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()

    def render(self) -> str:
        ins = "".join(f"[{label}]" for label in self.inputs)
        outs = "".join(f"[{label}]" for label in self.outputs)
        body = ",".join(stage.render() for stage in self.stages)
        return f"{ins}{body}{outs}"


@dataclass(frozen=True)
class FilterGraph:
    """An ordered set of chains, rendered as one -vf expression."""
    chains: tuple[FilterChain, ...]
    motion_highlighted: bool = False

    @property
    def stages(self) -> list[FilterStage]:
        return [stage for chain in self.chains for stage in chain.stages]

    def stage_names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    def has_stage(self, name: str) -> bool:
        return name in self.stage_names()

    def find(self, name: str) -> FilterStage:
        """First stage with the given filter name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        raise KeyError(name)

    def render(self) -> str:
        return ";".join(chain.render() for chain in self.chains)


def _render_value(value: OptionValue) -> str:
    text = str(value)
    # ffmpeg's filter parser needs quoting for spaces and separators
    if any(char in text for char in " :,;[]"):
        return f"'{text}'"
    return text


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class GifIntent:
    """What the caller wants out of a GIF encode."""
    track_motion: bool
    output_fps: int
    output_width: int


@dataclass(frozen=True)
class HighlightStyle:
    """Colour used to paint moving regions, as 0-1 RGB channels."""
    red: float = 1.0
    green: float = 0.84
    blue: float = 0.0

    @classmethod
    def from_hex(cls, color: str) -> "HighlightStyle":
        """Parse "#RRGGBB" (leading # optional)."""
        value = color.strip().lstrip("#")
        if len(value) != 6:
            raise ValueError(f"Highlight colour must be #RRGGBB, got {color!r}")
        channels = [int(value[i:i + 2], 16) / 255 for i in (0, 2, 4)]
        return cls(*(round(channel, 3) for channel in channels))


@dataclass
class FilterGraphBuilder:
    """
    Builds the filter graph for a GIF encode.

    Pure: build() does no I/O and never raises.
    """
    highlight: HighlightStyle = field(default_factory=HighlightStyle)

    def build(self, intent: GifIntent) -> FilterGraph:
        if intent.track_motion:
            return self._motion_highlighted(intent)
        return self._standard(intent)

    def _standard(self, intent: GifIntent) -> FilterGraph:
        return FilterGraph(chains=(
            FilterChain(
                stages=(
                    *self._resample_stages(intent),
                    FilterStage.of("split", outputs=2),
                ),
                outputs=("s0", "s1"),
            ),
            *self._palette_chains("s0", "s1"),
        ))

    def _motion_highlighted(self, intent: GifIntent) -> FilterGraph:
        return FilterGraph(
            chains=(
                FilterChain(
                    stages=(
                        *self._resample_stages(intent),
                        FilterStage.of("split", outputs=2),
                    ),
                    outputs=("base", "motion"),
                ),
                FilterChain(
                    inputs=("motion",),
                    stages=self._motion_mask_stages(),
                    outputs=("highlight",),
                ),
                FilterChain(
                    inputs=("base", "highlight"),
                    stages=(
                        FilterStage.of("overlay", format="auto"),
                        FilterStage.of("split", outputs=2),
                    ),
                    outputs=("s0", "s1"),
                ),
                *self._palette_chains("s0", "s1"),
            ),
            motion_highlighted=True,
        )

    def _resample_stages(self, intent: GifIntent) -> tuple[FilterStage, ...]:
        return (
            FilterStage.of("fps", fps=intent.output_fps),
            FilterStage.of("scale", w=intent.output_width, h=-1, flags=SCALE_FLAGS),
        )

    def _motion_mask_stages(self) -> tuple[FilterStage, ...]:
        # difference of consecutive frames, pushed towards black/white
        color = self.highlight
        return (
            FilterStage.of("tblend", all_mode="difference"),
            FilterStage.of("curves", all=MOTION_CURVE),
            FilterStage.of("format", pix_fmts="rgba"),
            FilterStage.of(
                "colorkey",
                color="black",
                similarity=MOTION_KEY_SIMILARITY,
                blend=MOTION_KEY_BLEND,
            ),
            FilterStage.of(
                "colorchannelmixer",
                rr=color.red, rg=color.red, rb=color.red,
                gr=color.green, gg=color.green, gb=color.green,
                br=color.blue, bg=color.blue, bb=color.blue,
            ),
        )

    def _palette_chains(self, palette_src: str, frames_src: str) -> tuple[FilterChain, ...]:
        return (
            FilterChain(
                inputs=(palette_src,),
                stages=(
                    FilterStage.of("palettegen", max_colors=PALETTE_COLORS, stats_mode="full"),
                ),
                outputs=("palette",),
            ),
            FilterChain(
                inputs=(frames_src, "palette"),
                stages=(FilterStage.of("paletteuse", dither=DITHER_MODE),),
            ),
        )
