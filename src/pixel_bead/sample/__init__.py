"""Image sampling - one representative color per bead."""

from pixel_bead.sample.sampler import SourceImage, derive_height, open_image, quantize_image, sample

__all__ = ["SourceImage", "derive_height", "open_image", "quantize_image", "sample"]
