"""
Pretty-print and minify ZPL markup.

Field data between ^FD and ^FS is copied verbatim in both modes; only
parameters of other commands are normalized.
"""

# Standard Library
import re


SIGILS = ("^", "~")
FIELD_DATA = "FD"
FIELD_TERMINATOR = "^FS"
MAX_CODE_LENGTH = 3

COMMA_SPACING_PATTERN = re.compile(r"\s*,\s*")
WHITESPACE_RUN_PATTERN = re.compile(r"\s{2,}")
WHITESPACE_PATTERN = re.compile(r"\s+")


#============================================
def normalize_params(params: str) -> str:
	"""
	Tidy parameters for pretty output.

	Args:
		params: Raw parameters.

	Returns:
		Parameters with outer whitespace stripped, no spaces around commas
		and internal whitespace runs collapsed to one space.
	"""
	text = params.strip()
	text = COMMA_SPACING_PATTERN.sub(",", text)
	text = WHITESPACE_RUN_PATTERN.sub(" ", text)
	return text


#============================================
def compact_params(params: str) -> str:
	return WHITESPACE_PATTERN.sub("", params)


#============================================
def read_code(text: str, start: int) -> str:
	"""
	Read an uppercase command code of up to three letters.

	A code beginning with FD is always exactly FD so field text that starts
	with capitals ("^FDHello") stays field data.
	"""
	index = start
	while index < len(text) and index - start < MAX_CODE_LENGTH and "A" <= text[index] <= "Z":
		index += 1
	code = text[start:index]
	if code.startswith(FIELD_DATA):
		return FIELD_DATA
	return code


#============================================
def find_next_sigil(text: str, start: int) -> int:
	"""
	Find the index of the next command sigil, or len(text) when none is left.
	"""
	for index in range(start, len(text)):
		if text[index] in SIGILS:
			return index
	return len(text)


#============================================
def format_commands(markup: str, pretty: bool) -> list[str]:
	"""
	Walk markup and emit one formatted string per command.

	Args:
		markup: ZPL markup.
		pretty: True for pretty normalization, False for minify.

	Returns:
		List of formatted command strings.
	"""
	index = 0
	lines: list[str] = []
	while index < len(markup):
		char = markup[index]
		if char.isspace():
			index += 1
			continue
		if char not in SIGILS:
			# junk outside any command
			index = find_next_sigil(markup, index)
			continue

		sigil = char
		index += 1
		code = read_code(markup, index)
		if not code:
			continue
		index += len(code)

		if code == FIELD_DATA:
			end = markup.find(FIELD_TERMINATOR, index)
			if end < 0:
				line = f"{sigil}{code}{markup[index:]}"
				index = len(markup)
			else:
				line = f"{sigil}{code}{markup[index:end]}{FIELD_TERMINATOR}"
				index = end + len(FIELD_TERMINATOR)
			lines.append(line.strip())
			continue

		next_index = find_next_sigil(markup, index)
		params = markup[index:next_index]
		index = next_index
		if pretty:
			params = normalize_params(params)
		else:
			params = compact_params(params)
		lines.append(f"{sigil}{code}{params}")
	return lines


#============================================
def pretty_print(markup: str) -> str:
	"""
	Format ZPL with one command per line.

	Args:
		markup: ZPL text.

	Returns:
		Pretty-printed ZPL.
	"""
	return "\n".join(format_commands(markup, pretty=True))


#============================================
def minify(markup: str) -> str:
	"""
	Format ZPL on a single line with whitespace removed outside field data.

	Args:
		markup: ZPL text.

	Returns:
		Minified ZPL.
	"""
	return "".join(format_commands(markup, pretty=False))
