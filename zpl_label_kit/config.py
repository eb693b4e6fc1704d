"""
Shared configuration, constants and geometry records.
"""

import dataclasses
import math


MM_PER_INCH = 25.4
POINTS_PER_INCH = 72.0

SUPPORTED_DPIS = (203, 300, 600)
LABELARY_DPMM = (6, 8, 12, 24)

DEFAULT_FONT_HEIGHT = 30
DEFAULT_LINE_GAP = 2
DEFAULT_BARCODE_HEIGHT = 100

TEAR_OFF_MARGIN_DOTS = 150
LL_MARKER = "<<LL_MARKER>>"

DEFAULT_PRINTER_PORT = 9100
DEFAULT_SEND_TIMEOUT = 5.0
DEFAULT_PREVIEW_TIMEOUT = 10.0
LABELARY_BASE_URL = "https://api.labelary.com"

MODEL_DPIS = {
	"ZD620": (203, 300),
	"ZT411": (300, 600),
}
# (print width, maximum label length) in inches
MODEL_LIMITS_INCHES = {
	"ZD620": (4.0, 39.0),
	"ZT411": (4.09, 39.0),
}


class PrinterConfigError(ValueError):
	"""
	Raised when a printer model is paired with a resolution it does not support.
	"""

	def __init__(self, model: str, dpi: int, allowed: tuple[int, ...]):
		self.model = model
		self.dpi = dpi
		self.allowed = allowed
		allowed_text = ", ".join(str(value) for value in sorted(allowed))
		super().__init__(f"DPI {dpi} is not valid for {model}. Allowed: {allowed_text}")


class UnknownPrinterModelError(ValueError):
	"""
	Raised when a printer model has no known limits.
	"""

	def __init__(self, model: str, known: tuple[str, ...]):
		self.model = model
		self.known = known
		super().__init__(f"Unknown printer model {model!r}. Known: {', '.join(known)}")


#============================================
def round_half_up(value: float) -> int:
	"""
	Round to the nearest integer, halves away from zero.

	Args:
		value: Value to round.

	Returns:
		Rounded integer.
	"""
	if value < 0:
		return -int(math.floor(-value + 0.5))
	return int(math.floor(value + 0.5))


#============================================
def inches_to_dots(value: float, dpi: int) -> int:
	"""
	Convert inches to printer dots.
	"""
	return round_half_up(value * dpi)


#============================================
def dots_to_inches(value: int, dpi: int) -> float:
	return value / float(dpi)


#============================================
def dots_to_mm(value: int, dpi: int) -> float:
	return dots_to_inches(value, dpi) * MM_PER_INCH


#============================================
def dots_to_points(value: int, dpi: int) -> float:
	"""
	Convert printer dots to PDF points.

	Args:
		value: Length in dots.
		dpi: Resolution in dots per inch.

	Returns:
		Length in points.
	"""
	return dots_to_inches(value, dpi) * POINTS_PER_INCH


#============================================
def dpi_to_dpmm(dpi: int) -> int:
	"""
	Convert dots per inch to the nearest dots per millimeter (203 -> 8).
	"""
	return round_half_up(dpi / MM_PER_INCH)


@dataclasses.dataclass(frozen=True)
class EstimatorConfig:
	default_font_height: int = DEFAULT_FONT_HEIGHT
	default_line_gap: int = DEFAULT_LINE_GAP
	default_barcode_height: int = DEFAULT_BARCODE_HEIGHT

	def __post_init__(self) -> None:
		for field in dataclasses.fields(self):
			value = getattr(self, field.name)
			if not isinstance(value, int) or value <= 0:
				raise ValueError(f"{field.name} must be a positive integer, got {value!r}")


@dataclasses.dataclass(frozen=True)
class RenderGeometry:
	dpi: int
	width_dots: int | None = None
	height_dots: int | None = None


@dataclasses.dataclass(frozen=True)
class Stock:
	width_inches: float
	height_inches: float
	is_continuous: bool = False
	gap_inches: float = 0.0

	def width_dots(self, dpi: int) -> int:
		return inches_to_dots(self.width_inches, dpi)

	def height_dots(self, dpi: int) -> int:
		return inches_to_dots(self.height_inches, dpi)

	def gap_dots(self, dpi: int) -> int:
		return inches_to_dots(self.gap_inches, dpi)

	def width_mm(self) -> float:
		return self.width_inches * MM_PER_INCH

	def height_mm(self) -> float:
		return self.height_inches * MM_PER_INCH

	def gap_mm(self) -> float:
		return self.gap_inches * MM_PER_INCH


@dataclasses.dataclass(frozen=True)
class Device:
	name: str
	native_dpi: int
	max_width_dots: int
	max_length_dots: int


@dataclasses.dataclass(frozen=True)
class RenderOptions:
	dpi: int
	stock: Stock

	@property
	def print_width_dots(self) -> int:
		return self.stock.width_dots(self.dpi)

	@property
	def nominal_height_dots(self) -> int:
		return self.stock.height_dots(self.dpi)

	@property
	def gap_dots(self) -> int:
		return self.stock.gap_dots(self.dpi)


STANDARD_STOCKS = {
	"roll_2x1": Stock(width_inches=2.0, height_inches=1.0, is_continuous=False, gap_inches=0.125),
	"roll_4x6": Stock(width_inches=4.0, height_inches=6.0, is_continuous=False, gap_inches=0.125),
	"continuous_2": Stock(width_inches=2.0, height_inches=1.0, is_continuous=True, gap_inches=0.0),
}


#============================================
def stock_from_mm(
	width_mm: float,
	height_mm: float,
	is_continuous: bool = False,
	gap_mm: float = 0.0,
) -> Stock:
	"""
	Build a Stock from millimeter measurements.

	Args:
		width_mm: Label width in millimeters.
		height_mm: Label height in millimeters.
		is_continuous: Whether the media is continuous.
		gap_mm: Gap between labels in millimeters.

	Returns:
		Stock.
	"""
	return Stock(
		width_inches=width_mm / MM_PER_INCH,
		height_inches=height_mm / MM_PER_INCH,
		is_continuous=is_continuous,
		gap_inches=gap_mm / MM_PER_INCH,
	)


#============================================
def build_device(model: str, dpi: int, name: str | None = None) -> Device:
	"""
	Build a Device for a known printer model.

	Args:
		model: Printer model name, e.g. "ZD620".
		dpi: Printhead resolution.
		name: Optional display name.

	Returns:
		Device with limits derived from the model.
	"""
	normalized = model.strip().upper()
	if normalized not in MODEL_DPIS:
		raise UnknownPrinterModelError(model, tuple(sorted(MODEL_DPIS)))
	allowed = MODEL_DPIS[normalized]
	if dpi not in allowed:
		raise PrinterConfigError(normalized, dpi, allowed)
	width_inches, length_inches = MODEL_LIMITS_INCHES[normalized]
	return Device(
		name=name or f"{normalized}-{dpi}",
		native_dpi=dpi,
		max_width_dots=inches_to_dots(width_inches, dpi),
		max_length_dots=inches_to_dots(length_inches, dpi),
	)


#============================================
def render_options_for_device(device: Device, stock: Stock) -> RenderOptions:
	"""
	Build render options at the device's native resolution.
	"""
	return RenderOptions(dpi=device.native_dpi, stock=stock)
