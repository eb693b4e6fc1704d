"""
Finalize ZPL for a device: framing, ^LL injection and limit validation.
"""

# Standard Library
import dataclasses
import typing

# local repo modules
import zpl_label_kit as zlk
import zpl_label_kit.config
import zpl_label_kit.length


EstimatorConfig = zlk.config.EstimatorConfig
RenderGeometry = zlk.config.RenderGeometry
Stock = zlk.config.Stock
Device = zlk.config.Device

LL_MARKER = zlk.config.LL_MARKER
TEAR_OFF_MARGIN_DOTS = zlk.config.TEAR_OFF_MARGIN_DOTS
FORMAT_START = "^XA"
FORMAT_END = "^XZ"


class RenderError(Exception):
	"""
	Base class for failures while finalizing a label.
	"""


class DimensionOverflowError(RenderError):
	"""
	Requested width or length exceeds what the device can print.
	"""

	def __init__(self, dimension: str, requested: int, maximum: int):
		self.dimension = dimension
		self.requested = requested
		self.maximum = maximum
		super().__init__(f"{dimension} overflow: requested {requested} dots, device maximum is {maximum} dots")


class ResolutionMismatchError(RenderError):
	"""
	Render resolution differs from the device's native resolution.
	"""

	def __init__(self, render_dpi: int, device_dpi: int):
		self.render_dpi = render_dpi
		self.device_dpi = device_dpi
		super().__init__(f"render resolution {render_dpi} dpi does not match device resolution {device_dpi} dpi")


class LabelSourceError(Exception):
	"""
	A label source could not produce markup.
	"""


class LabelSource(typing.Protocol):
	def produce_markup(self) -> str:
		...


@dataclasses.dataclass(frozen=True)
class LiteralLabel:
	markup: str

	def produce_markup(self) -> str:
		return self.markup


@dataclasses.dataclass(frozen=True)
class CallableLabel:
	factory: typing.Callable[[], str]

	def produce_markup(self) -> str:
		return self.factory()


@dataclasses.dataclass
class TemplateLabel:
	"""
	Label rendered from a named template in a TemplateStore.
	"""

	store: typing.Any
	name: str
	context: dict[str, typing.Any] = dataclasses.field(default_factory=dict)

	def produce_markup(self) -> str:
		return self.store.render(self.name, self.context)


#============================================
def as_label_source(label: "LabelSource | str") -> LabelSource:
	"""
	Wrap plain markup strings as a LiteralLabel.
	"""
	if isinstance(label, str):
		return LiteralLabel(label)
	return label


#============================================
def ensure_framing(markup: str) -> str:
	"""
	Wrap markup in ^XA ... ^XZ unless already present.

	Args:
		markup: ZPL text.

	Returns:
		Framed ZPL text.
	"""
	if FORMAT_START not in markup:
		markup = f"{FORMAT_START}\n{markup}"
	if FORMAT_END not in markup:
		markup = f"{markup}\n{FORMAT_END}"
	return markup


#============================================
def compute_label_length(
	markup: str,
	placeholder: str = LL_MARKER,
	estimator_config: EstimatorConfig | None = None,
) -> int:
	"""
	Estimate label length with the length placeholder removed.

	Args:
		markup: ZPL text that may contain the placeholder.
		placeholder: Placeholder text.
		estimator_config: Estimator defaults.

	Returns:
		Structural estimate in dots.
	"""
	if placeholder:
		markup = markup.replace(placeholder, "")
	return zlk.length.estimate_height_dots(markup, estimator_config)


#============================================
def inject_length(markup: str, length_dots: int, placeholder: str = LL_MARKER) -> str:
	"""
	Replace every placeholder with an explicit ^LL command.
	"""
	if not placeholder:
		return markup
	return markup.replace(placeholder, f"^LL{length_dots}")


#============================================
def validate_dimensions(stock: Stock, device: Device, length_dots: int) -> None:
	"""
	Check print width and length against device limits.

	Args:
		stock: Loaded media.
		device: Target device.
		length_dots: Final label length in dots.
	"""
	width_dots = stock.width_dots(device.native_dpi)
	if width_dots > device.max_width_dots:
		raise DimensionOverflowError("width", width_dots, device.max_width_dots)
	if length_dots > device.max_length_dots:
		raise DimensionOverflowError("length", length_dots, device.max_length_dots)


#============================================
def check_resolution(geometry: RenderGeometry, device: Device) -> None:
	if geometry.dpi != device.native_dpi:
		raise ResolutionMismatchError(geometry.dpi, device.native_dpi)


#============================================
def render_final_markup(
	label: "LabelSource | str",
	geometry: RenderGeometry,
	stock: Stock,
	device: Device,
	margin_dots: int = TEAR_OFF_MARGIN_DOTS,
	placeholder: str = LL_MARKER,
	estimator_config: EstimatorConfig | None = None,
	strict: bool = False,
) -> str:
	"""
	Produce device-ready ZPL from a label source.

	Steps: fetch markup, add ^XA/^XZ framing, estimate the length with the
	placeholder removed, add the tear-off margin, replace the placeholder
	with ^LL and validate against the device limits.

	Args:
		label: Label source or raw markup.
		geometry: Render target geometry.
		stock: Loaded media.
		device: Target device.
		margin_dots: Clearance added past the tear-off point.
		placeholder: Length placeholder text.
		estimator_config: Estimator defaults.
		strict: Require geometry.dpi to equal the device resolution.

	Returns:
		Finalized ZPL text.
	"""
	if margin_dots < 0:
		raise ValueError(f"margin_dots must not be negative, got {margin_dots}")
	if strict:
		check_resolution(geometry, device)

	source = as_label_source(label)
	markup = source.produce_markup()
	markup = ensure_framing(markup)

	estimate = compute_label_length(markup, placeholder, estimator_config)
	length_dots = estimate + margin_dots
	markup = inject_length(markup, length_dots, placeholder)

	validate_dimensions(stock, device, length_dots)
	return markup
