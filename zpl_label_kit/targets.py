"""
Output targets for finalized labels: stdout, files, network printers and
iTerm2 inline images.
"""

# Standard Library
import base64
import dataclasses
import pathlib
import socket

# local repo modules
import zpl_label_kit as zlk
import zpl_label_kit.config
import zpl_label_kit.engine
import zpl_label_kit.formatter


ResolutionMismatchError = zlk.engine.ResolutionMismatchError

DEFAULT_PRINTER_PORT = zlk.config.DEFAULT_PRINTER_PORT
DEFAULT_SEND_TIMEOUT = zlk.config.DEFAULT_SEND_TIMEOUT


class TargetError(RuntimeError):
	"""
	Raised when a target cannot deliver a payload.
	"""


@dataclasses.dataclass(frozen=True)
class MarkupPayload:
	markup: str
	resolution: int


@dataclasses.dataclass(frozen=True)
class ImagePayload:
	data: bytes
	resolution: int


#============================================
def check_payload_resolution(
	payload: "MarkupPayload | ImagePayload",
	resolution: int | None,
	strict: bool,
) -> None:
	"""
	Reject a payload whose resolution differs from the target's.

	Args:
		payload: Payload to send.
		resolution: Target resolution, None when unknown.
		strict: Only checked when True.
	"""
	if not strict or resolution is None:
		return
	if payload.resolution != resolution:
		raise ResolutionMismatchError(payload.resolution, resolution)


class StdoutTarget:
	def __init__(self, pretty: bool = True):
		self.pretty = pretty
		self.resolution = None

	def send(self, payload: "MarkupPayload | ImagePayload", strict: bool = False) -> None:
		check_payload_resolution(payload, self.resolution, strict)
		if isinstance(payload, ImagePayload):
			print(f"PNG {len(payload.data)} bytes")
			return
		if self.pretty:
			print(zlk.formatter.pretty_print(payload.markup))
		else:
			print(zlk.formatter.minify(payload.markup))


class FileTarget:
	def __init__(self, path: pathlib.Path, resolution: int | None = None):
		self.path = pathlib.Path(path)
		self.resolution = resolution

	def send(self, payload: "MarkupPayload | ImagePayload", strict: bool = False) -> None:
		check_payload_resolution(payload, self.resolution, strict)
		if isinstance(payload, ImagePayload):
			self.path.write_bytes(payload.data)
			return
		self.path.write_text(payload.markup, encoding="utf-8")


class NetworkTarget:
	"""
	Raw TCP printer connection (port 9100 on Zebra printers).
	"""

	def __init__(
		self,
		host: str,
		port: int = DEFAULT_PRINTER_PORT,
		timeout: float = DEFAULT_SEND_TIMEOUT,
		resolution: int | None = None,
	):
		if not host:
			raise ValueError("host must not be empty")
		self.host = host
		self.port = port
		self.timeout = timeout
		self.resolution = resolution

	def send(self, payload: "MarkupPayload | ImagePayload", strict: bool = False) -> None:
		check_payload_resolution(payload, self.resolution, strict)
		if isinstance(payload, ImagePayload):
			raise TargetError("Network printers accept ZPL payloads only")
		if not payload.markup:
			raise ValueError("markup must not be empty")
		data = payload.markup.encode("utf-8")
		try:
			with socket.create_connection((self.host, self.port), timeout=self.timeout) as sock:
				sock.sendall(data)
		except OSError as error:
			raise TargetError(f"Could not send to {self.host}:{self.port}: {error}") from error


class ITerm2Target:
	"""
	Show image payloads inline in iTerm2. Markup payloads are ignored.
	"""

	def __init__(self):
		self.resolution = None

	def send(self, payload: "MarkupPayload | ImagePayload", strict: bool = False) -> None:
		check_payload_resolution(payload, self.resolution, strict)
		if not isinstance(payload, ImagePayload):
			return
		encoded = base64.b64encode(payload.data).decode("ascii")
		print(f"\x1b]1337;File=inline=1;width=auto;height=auto;preserveAspectRatio=1:{encoded}\x07")
