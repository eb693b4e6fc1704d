import zpl_label_kit.formatter
import zpl_label_kit.tokenizer

pretty_print = zpl_label_kit.formatter.pretty_print
minify = zpl_label_kit.formatter.minify

SAMPLE = "^XA  ^FO 50 , 60  ^A0N, 30 ,30\r\n^FDHello   World^FS\n^FO10,10^FDa ^ b  ~c^FS ^XZ"


#============================================
def field_payloads(markup: str) -> list[str]:
	"""
	Collect ^FD payloads via the tokenizer.
	"""
	tokens = zpl_label_kit.tokenizer.tokenize(markup)
	return [token.params for token in tokens if token.name == "FD"]


#============================================
def test_pretty_print_one_command_per_line() -> None:
	assert pretty_print(SAMPLE) == "\n".join(
		[
			"^XA",
			"^FO50,60",
			"^A0N,30,30",
			"^FDHello   World^FS",
			"^FO10,10",
			"^FDa ^ b  ~c^FS",
			"^XZ",
		]
	)


#============================================
def test_minify_single_line() -> None:
	assert minify(SAMPLE) == "^XA^FO50,60^A0N,30,30^FDHello   World^FS^FO10,10^FDa ^ b  ~c^FS^XZ"


#============================================
def test_pretty_collapses_whitespace_runs() -> None:
	assert pretty_print("^FX  a   comment  here ") == "^FXa comment here"


#============================================
def test_field_data_survives_both_directions() -> None:
	"""
	Field text is byte-for-byte identical after pretty and minify passes.
	"""
	expected = field_payloads(SAMPLE)
	assert expected == ["Hello   World", "a ^ b  ~c"]
	assert field_payloads(minify(pretty_print(SAMPLE))) == expected
	assert field_payloads(pretty_print(minify(SAMPLE))) == expected

	crlf_markup = "^XA\r\n^FDa\r\nb^FS\r\n^XZ"
	assert field_payloads(minify(pretty_print(crlf_markup))) == ["a\r\nb"]
	assert field_payloads(pretty_print(minify(crlf_markup))) == ["a\r\nb"]
	assert minify(crlf_markup) == "^XA^FDa\r\nb^FS^XZ"


#============================================
def test_unterminated_field_data() -> None:
	assert pretty_print("^XA^FDtrailing text  ") == "^XA\n^FDtrailing text"


#============================================
def test_headerless_input_degrades() -> None:
	"""
	Junk without sigils yields nothing instead of failing.
	"""
	assert pretty_print("no commands here") == ""
	assert minify("garbage ^XA junk") == "^XAjunk"
	assert pretty_print("^^1^XZ") == "^XZ"


#============================================
def test_tilde_commands() -> None:
	assert minify("~JA\n ~HS") == "~JA~HS"
