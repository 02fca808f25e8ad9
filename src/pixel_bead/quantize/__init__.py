"""Nearest-color quantization against a bead palette."""

from pixel_bead.quantize.quantizer import Quantizer, nearest_color, quantize_rows

__all__ = ["Quantizer", "nearest_color", "quantize_rows"]
