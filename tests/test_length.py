import pytest

import zpl_label_kit.config
import zpl_label_kit.length

EstimatorConfig = zpl_label_kit.config.EstimatorConfig
estimate_height_dots = zpl_label_kit.length.estimate_height_dots


#============================================
def test_single_text_field() -> None:
	"""
	One line of text at y=50 with a 30 dot font ends at 80.
	"""
	assert estimate_height_dots("^XA^FO50,50^ADN,30,30^FDHello^FS^XZ") == 80


#============================================
def test_explicit_length_only() -> None:
	"""
	Without content the explicit length is returned as-is.
	"""
	assert estimate_height_dots("^XA^LL600^XZ") == 600
	assert estimate_height_dots("^XA^PW400^LL 321 ^XZ") == 321


#============================================
def test_explicit_length_versus_content() -> None:
	"""
	The larger of the content bottom and ^LL wins.
	"""
	content = "^XA^FO0,500^GB100,200,3^FS"
	assert estimate_height_dots(content + "^LL300^XZ") == 700
	assert estimate_height_dots(content + "^LL900^XZ") == 900


#============================================
def test_multiple_explicit_lengths_accumulate_by_max() -> None:
	assert estimate_height_dots("^LL400^LL200^LL350") == 400


#============================================
def test_barcode_height() -> None:
	"""
	Barcode height is read after the orientation letter; later, lower content
	does not shrink the estimate.
	"""
	assert estimate_height_dots("^FO10,200^BCN,100,Y,N,N^FD123^FS") == 300
	markup = "^FO10,200^BCN,100^FD1^FS^FO10,20^GB10,50,1^FS"
	assert estimate_height_dots(markup) == 300
	markup = "^FO10,200^BCN,100^FD1^FS^FO10,400^GB10,50,1^FS"
	assert estimate_height_dots(markup) == 450


#============================================
def test_barcode_height_forms() -> None:
	"""
	Height without orientation, empty orientation and the default.
	"""
	assert estimate_height_dots("^FO0,10^BC80^FS") == 90
	assert estimate_height_dots("^FO0,10^BC,60^FS") == 70
	assert estimate_height_dots("^FO0,10^BCN^FS") == 110
	config = EstimatorConfig(default_barcode_height=40)
	assert estimate_height_dots("^FO0,10^BC^FS", config) == 50


#============================================
def test_multiline_text() -> None:
	"""
	Both the \\& escape and real newlines start lines; gaps go between lines.
	"""
	# 3 lines * 30 + 2 gaps * 2
	assert estimate_height_dots("^FO0,0^FDone\\&two\ntwo^FS") == 94
	assert estimate_height_dots("^FO0,0^FDa\r\nb^FS") == 62


#============================================
def test_empty_text_counts_one_line() -> None:
	assert estimate_height_dots("^FO0,10^FD^FS") == 40


#============================================
def test_font_changes() -> None:
	"""
	^CF changes the default font height; ^A changes the current one.
	"""
	assert estimate_height_dots("^CF0,60^FO0,0^FDx^FS") == 60
	assert estimate_height_dots("^CF,45,20^FO0,0^FDx^FS") == 45
	assert estimate_height_dots("^CFD^FO0,0^FDx^FS") == 30
	assert estimate_height_dots("^A30,20^FO0,0^A0N,55,55^FDx^FS") == 55
	assert estimate_height_dots("^A@N,70,70,E:FONT.TTF^FO0,0^FDx^FS") == 70


#============================================
def test_label_home_offsets_fields() -> None:
	assert estimate_height_dots("^LH0,100^FO0,50^FDx^FS") == 180


#============================================
def test_malformed_input_never_raises() -> None:
	"""
	Bad numbers are ignored instead of raising.
	"""
	assert estimate_height_dots("^FOabc,^GBx,y^LLten^BCN,tall^FS") == 100
	assert estimate_height_dots("") == 0
	assert estimate_height_dots("no commands at all") == 0
	assert estimate_height_dots("^LL1_000") == 0


#============================================
def test_custom_line_gap() -> None:
	config = EstimatorConfig(default_font_height=20, default_line_gap=10)
	assert estimate_height_dots("^FO0,0^FDa\\&b^FS", config) == 50


#============================================
def test_estimator_config_rejects_non_positive() -> None:
	with pytest.raises(ValueError):
		EstimatorConfig(default_font_height=0)
	with pytest.raises(ValueError):
		EstimatorConfig(default_line_gap=-2)


#============================================
def test_parsers() -> None:
	"""
	Field parsers return None for absent or malformed values.
	"""
	length = zpl_label_kit.length
	assert length.parse_int(" 42 ") == 42
	assert length.parse_int("4 2") is None
	assert length.parse_two_ints("5") == (5, None)
	assert length.parse_change_font("D,30,20") == ("D", 30, 20)
	assert length.parse_change_font(",30,20") == (None, 30, 20)
	assert length.parse_change_font("") == (None, None, None)
	assert length.parse_box_height("100") is None


#============================================
def test_change_font_forms() -> None:
	"""
	A one-character first ^CF field is a font name, even when it is a digit.
	"""
	parse_change_font = zpl_label_kit.length.parse_change_font
	assert parse_change_font("0,60") == ("0", 60, None)
	assert parse_change_font("0,60,40") == ("0", 60, 40)
	assert parse_change_font("30,20") == (None, 30, 20)
	assert parse_change_font("30") == (None, 30, None)
	assert parse_change_font("D") == ("D", None, None)
	assert parse_change_font("A0,25") == ("A0", 25, None)


#============================================
def test_font_height_to_fit_lines() -> None:
	fit = zpl_label_kit.length.font_height_to_fit_lines
	assert fit(203, 10, 10, 4, 3) == 58
	assert fit(20, 10, 10, 4, 2) == 0
	with pytest.raises(ValueError):
		fit(203, 0, 0, 0, 0)
