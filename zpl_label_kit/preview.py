"""
Preview rendering: ZPL to PNG through Labelary or a local helper, and
proof PDFs assembled from preview images.
"""

# Standard Library
import dataclasses
import io
import pathlib
import subprocess

# PIP3 modules
import httpx
import PIL.Image
import pypdf
import reportlab.lib.utils
import reportlab.pdfgen.canvas

# local repo modules
import zpl_label_kit as zlk
import zpl_label_kit.config
import zpl_label_kit.engine


RenderGeometry = zlk.config.RenderGeometry
Stock = zlk.config.Stock
Device = zlk.config.Device

LABELARY_BASE_URL = zlk.config.LABELARY_BASE_URL
LABELARY_DPMM = zlk.config.LABELARY_DPMM
DEFAULT_PREVIEW_TIMEOUT = zlk.config.DEFAULT_PREVIEW_TIMEOUT
ERROR_SNIPPET_LENGTH = 200


class PreviewError(RuntimeError):
	"""
	Raised when a preview image cannot be produced.
	"""


@dataclasses.dataclass(frozen=True)
class ImageRenderOptions:
	geometry: RenderGeometry
	timeout: float = DEFAULT_PREVIEW_TIMEOUT


#============================================
def label_size_inches(geometry: RenderGeometry) -> tuple[float, float]:
	"""
	Compute preview size in inches, falling back to one inch per side.

	Args:
		geometry: Render geometry.

	Returns:
		Tuple of (width, height) in inches.
	"""
	dpi = geometry.dpi
	width_dots = max(1, geometry.width_dots or dpi)
	height_dots = max(1, geometry.height_dots or dpi)
	return (width_dots / dpi, height_dots / dpi)


#============================================
def check_image_data(data: bytes) -> PIL.Image.Image:
	"""
	Decode image bytes, raising PreviewError for anything unreadable.

	Args:
		data: Encoded image bytes.

	Returns:
		Loaded PIL image.
	"""
	if not data:
		raise PreviewError("Preview returned no image data")
	try:
		image = PIL.Image.open(io.BytesIO(data))
		image.load()
	except (PIL.UnidentifiedImageError, OSError) as error:
		raise PreviewError(f"Preview returned unreadable image data: {error}") from error
	return image


class LabelaryRenderer:
	"""
	Render ZPL through the Labelary web service.
	"""

	def __init__(
		self,
		base_url: str = LABELARY_BASE_URL,
		index: int = 0,
		accept: str = "image/png",
		transport: httpx.BaseTransport | None = None,
		verbose: bool = False,
	):
		self.base_url = base_url.rstrip("/")
		self.index = index
		self.accept = accept
		self.transport = transport
		self.verbose = verbose

	#============================================
	def build_url(self, geometry: RenderGeometry) -> str:
		"""
		Build the Labelary request URL for a geometry.

		Args:
			geometry: Render geometry.

		Returns:
			Request URL.
		"""
		dpmm = zlk.config.dpi_to_dpmm(geometry.dpi)
		if dpmm not in LABELARY_DPMM:
			allowed = ", ".join(str(value) for value in LABELARY_DPMM)
			raise PreviewError(f"Labelary does not support {dpmm} dpmm ({geometry.dpi} dpi). Allowed: {allowed}")
		width_inches, height_inches = label_size_inches(geometry)
		size = f"{width_inches:.3f}x{height_inches:.3f}"
		return f"{self.base_url}/v1/printers/{dpmm}dpmm/labels/{size}/{self.index}/"

	#============================================
	def render(self, markup: str, options: ImageRenderOptions) -> bytes:
		"""
		Fetch a rendered image for the markup.

		Args:
			markup: Finalized ZPL.
			options: Geometry and timeout.

		Returns:
			Image bytes in the requested format.
		"""
		url = self.build_url(options.geometry)
		if self.verbose:
			print(f"Labelary URL: {url}")
		headers = {"Accept": self.accept}
		try:
			with httpx.Client(timeout=options.timeout, transport=self.transport) as client:
				response = client.post(url, content=markup.encode("utf-8"), headers=headers)
		except httpx.TimeoutException as error:
			raise PreviewError(f"Labelary request timed out after {options.timeout}s") from error
		except httpx.HTTPError as error:
			raise PreviewError(f"Labelary request failed: {error}") from error

		if not response.is_success:
			snippet = response.text[:ERROR_SNIPPET_LENGTH]
			raise PreviewError(f"Labelary returned HTTP {response.status_code}: {snippet}")
		data = response.content
		if not data:
			raise PreviewError("Labelary returned an empty response")
		if self.accept == "image/png":
			check_image_data(data)
		return data


class Zpl2PngRenderer:
	"""
	Render ZPL with a local zpl2png-style helper executable.
	"""

	def __init__(self, helper_path: pathlib.Path, verbose: bool = False):
		self.helper_path = pathlib.Path(helper_path)
		self.verbose = verbose

	#============================================
	def build_command(self, geometry: RenderGeometry) -> list[str]:
		"""
		Build the helper command line.

		Args:
			geometry: Render geometry.

		Returns:
			Argument list.
		"""
		dpi = geometry.dpi
		width_dots = geometry.width_dots or dpi
		height_dots = geometry.height_dots or dpi
		width_mm = zlk.config.round_half_up(zlk.config.dots_to_mm(width_dots, dpi))
		height_mm = zlk.config.round_half_up(zlk.config.dots_to_mm(height_dots, dpi))
		return [
			str(self.helper_path),
			"--width-mm", str(width_mm),
			"--height-mm", str(height_mm),
			"--dpmm", str(zlk.config.dpi_to_dpmm(dpi)),
		]

	#============================================
	def render(self, markup: str, options: ImageRenderOptions) -> bytes:
		"""
		Run the helper with markup on stdin and return its PNG output.

		Args:
			markup: Finalized ZPL.
			options: Geometry and timeout.

		Returns:
			PNG bytes.
		"""
		command = self.build_command(options.geometry)
		if self.verbose:
			print(f"Preview helper: {' '.join(command)}")
		try:
			result = subprocess.run(
				command,
				input=markup.encode("utf-8"),
				capture_output=True,
				timeout=options.timeout,
				check=False,
			)
		except FileNotFoundError as error:
			raise PreviewError(f"Preview helper not found: {self.helper_path}") from error
		except subprocess.TimeoutExpired as error:
			raise PreviewError(f"Preview helper timed out after {options.timeout}s") from error

		if result.returncode != 0 or not result.stdout:
			message = result.stderr.decode("utf-8", errors="replace").strip()
			if not message:
				message = f"exit status {result.returncode}"
			raise PreviewError(f"Preview helper failed: {message}")
		check_image_data(result.stdout)
		return result.stdout


#============================================
def render_preview(
	label: "zlk.engine.LabelSource | str",
	geometry: RenderGeometry,
	stock: Stock,
	device: Device,
	renderer: "LabelaryRenderer | Zpl2PngRenderer",
	timeout: float = DEFAULT_PREVIEW_TIMEOUT,
	margin_dots: int = zlk.config.TEAR_OFF_MARGIN_DOTS,
) -> bytes:
	"""
	Finalize a label and render it to an image.

	Args:
		label: Label source or raw markup.
		geometry: Render geometry.
		stock: Loaded media.
		device: Target device.
		renderer: Image renderer.
		timeout: Renderer timeout in seconds.
		margin_dots: Tear-off margin for the length injection.

	Returns:
		Image bytes.
	"""
	markup = zlk.engine.render_final_markup(label, geometry, stock, device, margin_dots=margin_dots)
	options = ImageRenderOptions(geometry=geometry, timeout=timeout)
	return renderer.render(markup, options)


#============================================
def render_proof_page(image_data: bytes, geometry: RenderGeometry) -> pypdf.PageObject:
	"""
	Draw one preview image onto a label-sized PDF page.

	Args:
		image_data: Encoded preview image.
		geometry: Render geometry; falls back to the image size in dots.

	Returns:
		PDF page object.
	"""
	image = check_image_data(image_data)
	width_dots = geometry.width_dots or image.width
	height_dots = geometry.height_dots or image.height
	page_width = zlk.config.dots_to_points(width_dots, geometry.dpi)
	page_height = zlk.config.dots_to_points(height_dots, geometry.dpi)

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(page_width, page_height))
	image_reader = reportlab.lib.utils.ImageReader(image)
	pdf.drawImage(image_reader, 0, 0, width=page_width, height=page_height)
	pdf.showPage()
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def write_proof_pdf(
	images: list[bytes],
	output_path: pathlib.Path,
	geometry: RenderGeometry,
) -> int:
	"""
	Write preview images into a proof PDF, one label per page.

	Args:
		images: Encoded preview images.
		output_path: Output PDF path.
		geometry: Render geometry.

	Returns:
		Number of pages written.
	"""
	writer = pypdf.PdfWriter()
	for image_data in images:
		writer.add_page(render_proof_page(image_data, geometry))
	writer.write(str(output_path))
	return len(images)
