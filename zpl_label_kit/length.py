"""
Label length estimation from ZPL markup.

The estimator walks the command tokens once, tracks the field origin and
font height, and records the lowest edge reached by anything that occupies
vertical space:

- ^FD ... ^FS text: lines * font height plus the gaps between lines
- ^BC barcodes: the barcode height, or a default when omitted
- ^GB boxes and lines: the box height

Explicit ^LL commands are collected as well; the estimate is the larger of
the measured bottom edge and the largest ^LL seen.
"""

# Standard Library
import dataclasses
import re

# local repo modules
import zpl_label_kit as zlk
import zpl_label_kit.config
import zpl_label_kit.tokenizer


Token = zlk.tokenizer.Token
EstimatorConfig = zlk.config.EstimatorConfig

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
LINE_BREAK_ESCAPE = "\\&"


@dataclasses.dataclass
class _ParserState:
	default_font_height: int
	font_height: int
	home_x: int = 0
	home_y: int = 0
	field_x: int = 0
	field_y: int = 0
	max_bottom: int = 0
	explicit_length: int = 0


#============================================
def parse_int(value: str) -> int | None:
	"""
	Parse an integer field, returning None for anything malformed.

	Args:
		value: Raw field text.

	Returns:
		Parsed integer or None.
	"""
	text = value.strip()
	if not INTEGER_PATTERN.fullmatch(text):
		return None
	return int(text)


#============================================
def split_fields(params: str) -> list[str]:
	"""
	Split comma-separated parameters, keeping empty fields.
	"""
	return [part.strip() for part in params.split(",")]


#============================================
def parse_two_ints(params: str) -> tuple[int | None, int | None]:
	"""
	Parse "x,y" style parameters.

	Args:
		params: Raw parameters like "50,100".

	Returns:
		Tuple of (x, y); missing or malformed values are None.
	"""
	parts = params.split(",", 2)
	if len(parts) >= 2:
		return (parse_int(parts[0]), parse_int(parts[1]))
	return (parse_int(parts[0]), None)


#============================================
def parse_font_height(params: str) -> int | None:
	"""
	Find the height in ^A parameters.

	Accepts "DN,30,30", "0N,30,30" and "30,20"; the first numeric field is
	the height, font and orientation letters are ignored.
	"""
	for part in split_fields(params):
		value = parse_int(part)
		if value is not None:
			return value
	return None


#============================================
def parse_change_font(params: str) -> tuple[str | None, int | None, int | None]:
	"""
	Parse ^CF parameters.

	Handles "D,30,20", "0,30,20", ",30,20", "D" and "30". Font names are a
	single character, so "0" is font zero while "30" is a height.

	Args:
		params: Raw ^CF parameters.

	Returns:
		Tuple of (font, height, width); absent values are None.
	"""
	raw = params.strip()
	if not raw:
		return (None, None, None)
	parts = split_fields(raw)
	first = parts[0]
	first_is_font = len(first) == 1 or (first != "" and parse_int(first) is None)
	if len(parts) == 1:
		if first_is_font:
			return (first, None, None)
		return (None, parse_int(first), None)

	if first_is_font or first == "":
		font = first or None
		height = parse_int(parts[1])
		width = None
		if len(parts) >= 3:
			width = parse_int(parts[2])
		return (font, height, width)
	return (None, parse_int(first), parse_int(parts[1]))


#============================================
def parse_barcode_height(params: str) -> int | None:
	"""
	Parse the height from ^BC parameters (o,h,f,g,m).

	Args:
		params: Raw ^BC parameters.

	Returns:
		Height in dots or None.
	"""
	parts = split_fields(params)
	# a one-letter (or empty) first field is the orientation
	if len(parts[0]) <= 1:
		if len(parts) >= 2:
			return parse_int(parts[1])
		return None
	return parse_int(parts[0])


#============================================
def parse_box_height(params: str) -> int | None:
	"""
	Parse the height from ^GB parameters (w,h,t,c,r).
	"""
	parts = split_fields(params)
	if len(parts) >= 2:
		return parse_int(parts[1])
	return None


#============================================
def count_text_lines(payload: str) -> int:
	"""
	Count the printed lines of a ^FD payload.

	Both the \\& escape and real newlines start a new line. An empty
	payload still counts as one line.

	Args:
		payload: Raw field data.

	Returns:
		Line count, at least 1.
	"""
	text = payload.replace(LINE_BREAK_ESCAPE, "\n")
	text = text.replace("\r\n", "\n").replace("\r", "\n")
	return max(1, len(text.split("\n")))


#============================================
def measure_text_height(lines: int, font_height: int, line_gap: int) -> int:
	if lines <= 0:
		return 0
	return lines * font_height + (lines - 1) * line_gap


#============================================
def estimate_tokens(tokens: list[Token], config: EstimatorConfig | None = None) -> int:
	"""
	Estimate label height in dots from a token sequence.

	Args:
		tokens: Tokens from tokenize().
		config: Estimator defaults.

	Returns:
		max(measured bottom edge, largest ^LL), never negative.
	"""
	if config is None:
		config = EstimatorConfig()
	state = _ParserState(
		default_font_height=config.default_font_height,
		font_height=config.default_font_height,
	)

	for token in tokens:
		name = token.name
		if name == "LH":
			x, y = parse_two_ints(token.params)
			state.home_x = x or 0
			state.home_y = y or 0
		elif name == "FO":
			x, y = parse_two_ints(token.params)
			state.field_x = (x or 0) + state.home_x
			state.field_y = (y or 0) + state.home_y
		elif name in ("A", "A@"):
			height = parse_font_height(token.params)
			if height is not None:
				state.font_height = height
		elif name == "CF":
			_font, height, _width = parse_change_font(token.params)
			if height is not None:
				state.default_font_height = height
				state.font_height = height
		elif name == "BC":
			height = parse_barcode_height(token.params)
			if height is None:
				height = config.default_barcode_height
			state.max_bottom = max(state.max_bottom, state.field_y + height)
		elif name == "GB":
			height = parse_box_height(token.params)
			if height is not None:
				state.max_bottom = max(state.max_bottom, state.field_y + height)
		elif name == "LL":
			value = parse_int(token.params)
			if value is not None:
				state.explicit_length = max(state.explicit_length, value)
		elif name == "FD":
			lines = count_text_lines(token.params)
			content_height = measure_text_height(lines, state.font_height, config.default_line_gap)
			state.max_bottom = max(state.max_bottom, state.field_y + content_height)

	return max(0, state.max_bottom, state.explicit_length)


#============================================
def estimate_height_dots(markup: str, config: EstimatorConfig | None = None) -> int:
	"""
	Estimate label height in dots from ZPL markup.

	Args:
		markup: ZPL text.
		config: Estimator defaults.

	Returns:
		Estimated height in dots.
	"""
	tokens = zlk.tokenizer.tokenize(markup)
	return estimate_tokens(tokens, config)


#============================================
def font_height_to_fit_lines(
	label_height: int,
	pad_top: int,
	pad_bottom: int,
	gap: int,
	lines: int,
) -> int:
	"""
	Compute the largest font height that fits a number of text lines.

	Args:
		label_height: Label height in dots.
		pad_top: Top padding in dots.
		pad_bottom: Bottom padding in dots.
		gap: Gap between lines in dots.
		lines: Number of text lines.

	Returns:
		Font height in dots, never negative.
	"""
	if lines <= 0:
		raise ValueError(f"lines must be positive, got {lines}")
	available = label_height - pad_top - pad_bottom
	return max(0, (available - (lines - 1) * gap) // lines)
