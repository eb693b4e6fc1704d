"""
CLI entry points for finalizing, formatting, previewing and printing ZPL labels.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import zpl_label_kit as zlk
import zpl_label_kit.config
import zpl_label_kit.engine
import zpl_label_kit.formatter
import zpl_label_kit.length
import zpl_label_kit.preview
import zpl_label_kit.targets
import zpl_label_kit.templates


RenderGeometry = zlk.config.RenderGeometry
Stock = zlk.config.Stock
Device = zlk.config.Device

STANDARD_STOCKS = zlk.config.STANDARD_STOCKS
DEFAULT_MODEL = "ZD620"
DEFAULT_DPI = 203
DEFAULT_STOCK = "roll_2x1"
TEAR_OFF_MARGIN_DOTS = zlk.config.TEAR_OFF_MARGIN_DOTS
STORE_FOLDER = "zpl-label-kit"
DEFAULT_PRINTER_PORT = zlk.config.DEFAULT_PRINTER_PORT

HANDLED_ERRORS = (
	zlk.engine.RenderError,
	zlk.engine.LabelSourceError,
	zlk.preview.PreviewError,
	zlk.targets.TargetError,
	zlk.config.PrinterConfigError,
	zlk.config.UnknownPrinterModelError,
)


#============================================
def build_geometry(device: Device, stock: Stock, length_dots: int | None = None) -> RenderGeometry:
	"""
	Build render geometry for the device and stock.

	Args:
		device: Target device.
		stock: Loaded media.
		length_dots: Label length to render; nominal stock height when None.

	Returns:
		RenderGeometry.
	"""
	options = zlk.config.render_options_for_device(device, stock)
	height_dots = options.nominal_height_dots
	if length_dots is not None:
		height_dots = length_dots
	return RenderGeometry(
		dpi=options.dpi,
		width_dots=options.print_width_dots,
		height_dots=height_dots,
	)


#============================================
def build_labels(args: argparse.Namespace) -> list[tuple[str, "zlk.engine.LabelSource"]]:
	"""
	Build label sources from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		List of (display name, label source).
	"""
	labels = []
	if args.template:
		if args.store_dir:
			store = zlk.templates.open_template_store(
				pathlib.Path(args.store_dir),
				STORE_FOLDER,
				legacy_folders=args.legacy_folders,
			)
		else:
			store = zlk.templates.TemplateStore(pathlib.Path(args.store_path))
		store.load()
		labels.append((f"template:{args.template}", zlk.engine.TemplateLabel(store, args.template)))
	for input_path in args.inputs:
		path = pathlib.Path(input_path)
		markup = path.read_text(encoding="utf-8")
		labels.append((str(path), zlk.engine.LiteralLabel(markup)))
	return labels


#============================================
def format_markup(markup: str, output_format: str) -> str:
	if output_format == "pretty":
		return zlk.formatter.pretty_print(markup)
	if output_format == "minify":
		return zlk.formatter.minify(markup)
	return markup


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Finalize ZPL labels: estimate length, inject ^LL, format and print.")
	parser.add_argument("inputs", nargs="*", help="ZPL files.")

	source_group = parser.add_argument_group("Templates")
	source_group.add_argument("-t", "--template", dest="template", default=None, help="Template name to render.")
	source_group.add_argument("-s", "--store", dest="store_path", default="templates.json", help="Template archive JSON path.")
	source_group.add_argument(
		"--store-dir",
		dest="store_dir",
		default=None,
		help=f"Support directory holding {STORE_FOLDER}/templates.json; overrides --store.",
	)
	source_group.add_argument(
		"--legacy-folder",
		dest="legacy_folders",
		action="append",
		default=[],
		help="Older folder under --store-dir to migrate templates from (repeatable).",
	)

	device_group = parser.add_argument_group("Device")
	device_group.add_argument("--model", dest="model", default=DEFAULT_MODEL, help="Printer model.")
	device_group.add_argument("--dpi", dest="dpi", type=int, default=DEFAULT_DPI, help="Printhead resolution.")
	device_group.add_argument(
		"--stock",
		dest="stock",
		choices=sorted(STANDARD_STOCKS),
		default=DEFAULT_STOCK,
		help="Loaded label stock.",
	)
	device_group.add_argument("--margin", dest="margin", type=int, default=TEAR_OFF_MARGIN_DOTS, help="Tear-off margin in dots.")
	device_group.add_argument("--strict", dest="strict", action="store_true", help="Require matching resolutions.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument(
		"-f",
		"--format",
		dest="output_format",
		choices=("pretty", "minify", "raw"),
		default="pretty",
		help="Console output format.",
	)
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Write finalized ZPL to a file.")
	output_group.add_argument("--host", dest="host", default=None, help="Send finalized ZPL to a network printer.")
	output_group.add_argument("--port", dest="port", type=int, default=DEFAULT_PRINTER_PORT, help="Printer TCP port.")
	output_group.add_argument("-p", "--preview", dest="preview_path", default=None, help="Write a Labelary PNG preview.")
	output_group.add_argument("--proof", dest="proof_path", default=None, help="Write a proof PDF of all previews.")
	output_group.add_argument("--show", dest="show", action="store_true", help="Show the preview inline in iTerm2.")
	output_group.add_argument("-q", "--quiet", dest="verbose", action="store_false", help="Less console output.")

	parser.set_defaults(strict=False, show=False, verbose=True)
	args = parser.parse_args(argv)
	if not args.inputs and not args.template:
		parser.error("provide ZPL files or --template")
	if args.margin < 0:
		parser.error(f"--margin must not be negative, got {args.margin}")
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> None:
	"""
	Finalize every label and send it to the requested targets.

	Args:
		args: Parsed argparse namespace.
	"""
	device = zlk.config.build_device(args.model, args.dpi)
	stock = STANDARD_STOCKS[args.stock]
	if args.verbose:
		print("ZPL label pipeline")
		print(f"Device: {device.name} ({device.native_dpi} dpi, max {device.max_width_dots}x{device.max_length_dots} dots)")
		print(f"Stock: {args.stock}")
		print(f"Margin: {args.margin} dots")

	start_time = time.perf_counter()
	labels = build_labels(args)
	base_geometry = build_geometry(device, stock)

	targets = [zlk.targets.StdoutTarget(pretty=args.output_format == "pretty")]
	if args.output_format == "raw":
		targets = []
	if args.output_path:
		targets.append(zlk.targets.FileTarget(pathlib.Path(args.output_path)))
	if args.host:
		targets.append(zlk.targets.NetworkTarget(args.host, args.port, resolution=device.native_dpi))

	renderer = None
	if args.preview_path or args.proof_path or args.show:
		renderer = zlk.preview.LabelaryRenderer(verbose=args.verbose)

	render_time = 0.0
	preview_time = 0.0
	images = []
	for name, label in labels:
		render_start = time.perf_counter()
		markup = zlk.engine.render_final_markup(
			label,
			base_geometry,
			stock,
			device,
			margin_dots=args.margin,
			strict=args.strict,
		)
		length_dots = zlk.length.estimate_height_dots(markup)
		render_time += time.perf_counter() - render_start
		if args.verbose:
			print(f"{name}: length {length_dots} dots")

		if args.output_format == "raw":
			print(markup)
		payload = zlk.targets.MarkupPayload(markup=markup, resolution=device.native_dpi)
		for target in targets:
			target.send(payload, strict=args.strict)

		if renderer is not None:
			preview_start = time.perf_counter()
			geometry = build_geometry(device, stock, length_dots)
			options = zlk.preview.ImageRenderOptions(geometry=geometry)
			images.append(renderer.render(markup, options))
			preview_time += time.perf_counter() - preview_start

	if args.preview_path and images:
		preview_path = pathlib.Path(args.preview_path)
		image_target = zlk.targets.FileTarget(preview_path)
		image_target.send(zlk.targets.ImagePayload(data=images[0], resolution=device.native_dpi))
		if args.verbose:
			print(f"Preview written: {preview_path}")
	if args.show:
		show_target = zlk.targets.ITerm2Target()
		for image in images:
			show_target.send(zlk.targets.ImagePayload(data=image, resolution=device.native_dpi))
	if args.proof_path and images:
		proof_path = pathlib.Path(args.proof_path)
		# page height follows each preview image
		proof_geometry = RenderGeometry(dpi=device.native_dpi, width_dots=base_geometry.width_dots)
		pages = zlk.preview.write_proof_pdf(images, proof_path, proof_geometry)
		if args.verbose:
			print(f"Proof pages written: {pages} ({proof_path})")

	if args.verbose:
		total_time = time.perf_counter() - start_time
		print(
			"Timing: render={:.2f}s preview={:.2f}s total={:.2f}s".format(
				render_time,
				preview_time,
				total_time,
			)
		)


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	try:
		run_pipeline(args)
	except HANDLED_ERRORS as error:
		print(f"Error: {error}", file=sys.stderr)
		return 1
	return 0


if __name__ == "__main__":
	sys.exit(main())
