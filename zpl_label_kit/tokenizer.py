"""
ZPL command tokenizer.
"""

# Standard Library
import dataclasses


SIGILS = ("^", "~")
FIELD_DATA = "FD"
FIELD_SEPARATOR = "FS"


@dataclasses.dataclass(frozen=True)
class Token:
	name: str
	params: str


#============================================
def read_mnemonic(chars: str, start: int) -> tuple[str, int]:
	"""
	Read a command mnemonic starting just after a sigil.

	Args:
		chars: Full markup text.
		start: Index of the first mnemonic character.

	Returns:
		Tuple of (mnemonic, index after the mnemonic). The mnemonic is
		empty when no command name follows the sigil.
	"""
	if start >= len(chars):
		return ("", start)
	first = chars[start]
	if first in SIGILS or first.isspace():
		return ("", start)
	index = start + 1
	if first == "A":
		# ^A alone, or ^A@ for downloadable fonts
		if index < len(chars) and chars[index] == "@":
			return ("A@", index + 1)
		return ("A", index)
	name = first
	if index < len(chars) and chars[index].isalnum():
		name += chars[index]
		index += 1
	return (name, index)


#============================================
def read_params(chars: str, start: int) -> tuple[str, int]:
	"""
	Read command parameters up to the next sigil.

	Args:
		chars: Full markup text.
		start: Index after the mnemonic.

	Returns:
		Tuple of (stripped parameters, index of the next sigil or end).
	"""
	index = start
	while index < len(chars) and chars[index] not in SIGILS:
		index += 1
	return (chars[start:index].strip(), index)


#============================================
def read_field_data(chars: str, start: int) -> tuple[str, int]:
	"""
	Capture ^FD text verbatim until the matching ^FS.

	A caret that does not open ^FS is kept as literal text.

	Args:
		chars: Full markup text.
		start: Index after the FD mnemonic.

	Returns:
		Tuple of (payload, index after ^FS or end of input).
	"""
	payload: list[str] = []
	index = start
	while index < len(chars):
		char = chars[index]
		if char == "^":
			name, after = read_mnemonic(chars, index + 1)
			if name == FIELD_SEPARATOR:
				return ("".join(payload), after)
		payload.append(char)
		index += 1
	# unterminated field data keeps everything collected
	return ("".join(payload), index)


#============================================
def tokenize(markup: str) -> list[Token]:
	"""
	Split ZPL markup into command tokens.

	Args:
		markup: ZPL text.

	Returns:
		List of Token entries in document order.
	"""
	tokens: list[Token] = []
	index = 0
	total = len(markup)
	while index < total:
		if markup[index] not in SIGILS:
			index += 1
			continue
		name, after_name = read_mnemonic(markup, index + 1)
		if not name:
			index += 1
			continue
		if name == FIELD_DATA:
			payload, index = read_field_data(markup, after_name)
			tokens.append(Token(name=FIELD_DATA, params=payload))
			continue
		params, index = read_params(markup, after_name)
		tokens.append(Token(name=name, params=params))
	return tokens
