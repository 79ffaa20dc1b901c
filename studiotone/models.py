"""
Data models for the StudioTone enhancement pipeline.

Buffers are owned by whichever stage currently holds them; every model
here except ImageBuffer is frozen and replaced wholesale on change.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Tuple, Optional
import numpy as np
from PIL import Image


# Pillow modes holding 16-bit gray samples (16-bit PNG, TIFF)
WIDE_INTEGER_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, float(value)))


@dataclass(frozen=True, eq=False)
class ImageBuffer:
    """
    RGBA image with 8-bit channels stored row-major.

    ``data`` has shape (height, width, 4) and dtype uint8, so the flat
    sample sequence has exactly width * height * 4 entries.
    """
    width: int
    height: int
    data: np.ndarray = field(repr=False)

    def __post_init__(self):
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")
        if self.data.dtype != np.uint8:
            raise ValueError(f"Image data must be uint8, got {self.data.dtype}")
        if self.data.shape != (self.height, self.width, 4):
            raise ValueError(
                f"Image data shape {self.data.shape} does not match "
                f"{self.width}x{self.height} RGBA"
            )

    @classmethod
    def from_array(cls, array: np.ndarray) -> 'ImageBuffer':
        """
        Build a buffer from a gray, RGB or RGBA uint8 array.

        The array is copied; missing alpha is filled with 255.
        """
        array = np.asarray(array)
        if array.dtype != np.uint8:
            array = np.clip(np.rint(array), 0, 255).astype(np.uint8)

        if array.ndim == 2:
            array = np.repeat(array[:, :, np.newaxis], 3, axis=2)

        if array.ndim != 3 or array.shape[2] not in (3, 4):
            raise ValueError(f"Unsupported image array shape: {array.shape}")

        height, width = array.shape[:2]
        if array.shape[2] == 3:
            rgba = np.empty((height, width, 4), dtype=np.uint8)
            rgba[:, :, :3] = array
            rgba[:, :, 3] = 255
        else:
            rgba = np.ascontiguousarray(array).copy()

        return cls(width=width, height=height, data=rgba)

    @classmethod
    def from_pil(cls, image: Image.Image) -> 'ImageBuffer':
        """
        Build a buffer from a Pillow image in any mode.

        16-bit integer modes are scaled to 8 bits; Pillow's own conversion
        clips them at 255 instead.
        """
        if image.mode in WIDE_INTEGER_MODES:
            samples = np.asarray(image).astype(np.float64) / 257.0
            return cls.from_array(samples)
        return cls.from_array(np.asarray(image.convert("RGBA")))

    @classmethod
    def filled(cls, width: int, height: int,
               color: Tuple[int, int, int, int]) -> 'ImageBuffer':
        """Create a buffer where every pixel has the same RGBA value."""
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[:, :] = color
        return cls(width=width, height=height, data=data)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.data)

    def copy(self) -> 'ImageBuffer':
        return ImageBuffer(self.width, self.height, self.data.copy())

    def with_rgb(self, rgb: np.ndarray) -> 'ImageBuffer':
        """Return a new buffer with replaced RGB channels and this alpha."""
        out = np.empty_like(self.data)
        out[:, :, :3] = rgb
        out[:, :, 3] = self.data[:, :, 3]
        return ImageBuffer(self.width, self.height, out)

    @property
    def rgb(self) -> np.ndarray:
        return self.data[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.data[:, :, 3]

    @property
    def pixels(self) -> np.ndarray:
        """Flat RGBA sample sequence (read-only view)."""
        view = self.data.reshape(-1)
        view.flags.writeable = False
        return view

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ImageBuffer):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and np.array_equal(self.data, other.data))


@dataclass(frozen=True)
class HistogramStatistics:
    """Luminance and channel statistics of an analyzed image."""
    histogram: Tuple[int, ...]
    pixel_count: int
    min_luminance: int
    max_luminance: int
    mean_luminance: float
    std_luminance: float
    mean_red: float
    mean_green: float
    mean_blue: float
    p2: int
    p98: int

    @property
    def luminance_range(self) -> int:
        return self.max_luminance - self.min_luminance

    def to_dict(self, include_histogram: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        if include_histogram:
            data['histogram'] = list(self.histogram)
        else:
            data.pop('histogram')
        return data


@dataclass(frozen=True)
class FilterParameters:
    """
    Basic color filter settings.

    brightness, contrast and saturation are percentages where 100 means no
    change; warmth is a 0-100 sepia blend strength.
    """
    brightness: float = 100.0  # 50 to 150
    contrast: float = 100.0    # 50 to 150
    saturation: float = 100.0  # 0 to 200
    warmth: float = 0.0        # 0 to 100

    def __post_init__(self):
        object.__setattr__(self, 'brightness', _clamp(self.brightness, 50.0, 150.0))
        object.__setattr__(self, 'contrast', _clamp(self.contrast, 50.0, 150.0))
        object.__setattr__(self, 'saturation', _clamp(self.saturation, 0.0, 200.0))
        object.__setattr__(self, 'warmth', _clamp(self.warmth, 0.0, 100.0))

    @classmethod
    def identity(cls) -> 'FilterParameters':
        return cls()

    @property
    def is_identity(self) -> bool:
        return self == FilterParameters.identity()


@dataclass(frozen=True)
class ToneCurveConfig:
    """Parametric black/white point, gamma, shadow lift and highlight roll-off curve."""
    black_point: float = 0.0
    white_point: float = 255.0
    gamma: float = 1.0
    shadow_lift: float = 0.0        # 0 to 1
    highlight_rolloff: float = 0.0  # 0 to 1

    def __post_init__(self):
        black = _clamp(self.black_point, 0.0, 254.0)
        white = _clamp(self.white_point, black + 1.0, 255.0)
        object.__setattr__(self, 'black_point', black)
        object.__setattr__(self, 'white_point', white)
        object.__setattr__(self, 'gamma', max(0.01, float(self.gamma)))
        object.__setattr__(self, 'shadow_lift', _clamp(self.shadow_lift, 0.0, 1.0))
        object.__setattr__(self, 'highlight_rolloff', _clamp(self.highlight_rolloff, 0.0, 1.0))

    @classmethod
    def identity(cls) -> 'ToneCurveConfig':
        return cls()

    @property
    def is_identity(self) -> bool:
        return self == ToneCurveConfig.identity()


@dataclass(frozen=True)
class FeatureToggles:
    """Independent switches for the optional pipeline stages."""
    sharpen: bool = False
    studio_lighting: bool = False
    smart_tone: bool = False

    @classmethod
    def identity(cls) -> 'FeatureToggles':
        return cls()

    @classmethod
    def all_enabled(cls) -> 'FeatureToggles':
        return cls(sharpen=True, studio_lighting=True, smart_tone=True)


@dataclass(frozen=True)
class EnhancementParameters:
    """Immutable snapshot of every setting a recompute reads."""
    filters: FilterParameters = field(default_factory=FilterParameters)
    tone_curve: ToneCurveConfig = field(default_factory=ToneCurveConfig)
    toggles: FeatureToggles = field(default_factory=FeatureToggles)

    @classmethod
    def identity(cls) -> 'EnhancementParameters':
        return cls()

    def replace(self, filters: Optional[FilterParameters] = None,
                tone_curve: Optional[ToneCurveConfig] = None,
                toggles: Optional[FeatureToggles] = None) -> 'EnhancementParameters':
        return EnhancementParameters(
            filters=filters if filters is not None else self.filters,
            tone_curve=tone_curve if tone_curve is not None else self.tone_curve,
            toggles=toggles if toggles is not None else self.toggles,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'filters': asdict(self.filters),
            'tone_curve': asdict(self.tone_curve),
            'toggles': asdict(self.toggles),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EnhancementParameters':
        return cls(
            filters=FilterParameters(**data.get('filters', {})),
            tone_curve=ToneCurveConfig(**data.get('tone_curve', {})),
            toggles=FeatureToggles(**data.get('toggles', {})),
        )
