import pytest

import zpl_label_kit.config
import zpl_label_kit.engine

engine = zpl_label_kit.engine
RenderGeometry = zpl_label_kit.config.RenderGeometry
Device = zpl_label_kit.config.Device
LL_MARKER = zpl_label_kit.config.LL_MARKER

BODY = "^FO50,50^ADN,30,30^FDHello^FS"


#============================================
def test_ensure_framing_adds_missing_commands() -> None:
	assert engine.ensure_framing(BODY) == f"^XA\n{BODY}\n^XZ"
	assert engine.ensure_framing("^XA" + BODY) == f"^XA{BODY}\n^XZ"


#============================================
def test_ensure_framing_is_idempotent() -> None:
	framed = engine.ensure_framing(BODY)
	assert engine.ensure_framing(framed) == framed
	assert framed.count("^XA") == 1
	assert framed.count("^XZ") == 1


#============================================
def test_placeholder_is_replaced_with_length(stock_2x1, zd620_203) -> None:
	"""
	Every placeholder becomes ^LL with the estimate plus the margin.
	"""
	markup = f"^XA{LL_MARKER}{BODY}^XZ"
	geometry = RenderGeometry(dpi=203)
	result = engine.render_final_markup(markup, geometry, stock_2x1, zd620_203)
	assert LL_MARKER not in result
	assert result == f"^XA^LL230{BODY}^XZ"


#============================================
def test_every_placeholder_occurrence_is_replaced(stock_2x1, zd620_203) -> None:
	markup = f"{LL_MARKER}{BODY}{LL_MARKER}"
	result = engine.render_final_markup(markup, RenderGeometry(dpi=203), stock_2x1, zd620_203, margin_dots=0)
	assert LL_MARKER not in result
	assert result.count("^LL80") == 2
	assert result.startswith("^XA\n") and result.endswith("\n^XZ")


#============================================
def test_explicit_length_in_document_is_respected(stock_2x1, zd620_203) -> None:
	"""
	A larger ^LL already in the document raises the injected length.
	"""
	markup = f"^XA{LL_MARKER}^LL500{BODY}^XZ"
	result = engine.render_final_markup(markup, RenderGeometry(dpi=203), stock_2x1, zd620_203, margin_dots=20)
	assert result.startswith("^XA^LL520^LL500")


#============================================
def test_label_sources() -> None:
	"""
	Literal, callable and template sources all produce markup.
	"""

	class FakeStore:
		def render(self, name, context):
			return f"^FD{name}:{context['value']}^FS"

	assert engine.LiteralLabel("^XA^XZ").produce_markup() == "^XA^XZ"
	assert engine.CallableLabel(lambda: "^FDx^FS").produce_markup() == "^FDx^FS"
	label = engine.TemplateLabel(FakeStore(), "price", {"value": 3})
	assert label.produce_markup() == "^FDprice:3^FS"


#============================================
def test_source_failure_propagates_unchanged(stock_2x1, zd620_203) -> None:
	error = engine.LabelSourceError("template missing")

	def failing() -> str:
		raise error

	with pytest.raises(engine.LabelSourceError) as info:
		engine.render_final_markup(engine.CallableLabel(failing), RenderGeometry(dpi=203), stock_2x1, zd620_203)
	assert info.value is error


#============================================
def test_length_overflow(stock_2x1) -> None:
	"""
	Estimate 1051 plus the 150 dot margin exceeds a 1200 dot device by one.
	"""
	device = Device(name="test", native_dpi=203, max_width_dots=812, max_length_dots=1200)
	markup = f"^XA{LL_MARKER}^FO0,1000^GB10,51,1^FS^XZ"
	with pytest.raises(engine.DimensionOverflowError) as info:
		engine.render_final_markup(markup, RenderGeometry(dpi=203), stock_2x1, device)
	assert info.value.dimension == "length"
	assert info.value.requested == 1201
	assert info.value.maximum == 1200

	markup = f"^XA{LL_MARKER}^FO0,1000^GB10,50,1^FS^XZ"
	result = engine.render_final_markup(markup, RenderGeometry(dpi=203), stock_2x1, device)
	assert "^LL1200" in result


#============================================
def test_width_overflow() -> None:
	"""
	Stock wider than the printhead fails on width.
	"""
	stock = zpl_label_kit.config.STANDARD_STOCKS["roll_4x6"]
	device = Device(name="narrow", native_dpi=300, max_width_dots=600, max_length_dots=12000)
	with pytest.raises(engine.DimensionOverflowError) as info:
		engine.render_final_markup(BODY, RenderGeometry(dpi=300), stock, device)
	assert info.value.dimension == "width"
	assert info.value.requested == 1200
	assert info.value.maximum == 600


#============================================
def test_strict_resolution_check(stock_2x1, zd620_203) -> None:
	geometry = RenderGeometry(dpi=300)
	with pytest.raises(engine.ResolutionMismatchError) as info:
		engine.render_final_markup(BODY, geometry, stock_2x1, zd620_203, strict=True)
	assert info.value.render_dpi == 300
	assert info.value.device_dpi == 203
	assert engine.render_final_markup(BODY, geometry, stock_2x1, zd620_203).startswith("^XA")


#============================================
def test_negative_margin_rejected(stock_2x1, zd620_203) -> None:
	with pytest.raises(ValueError):
		engine.render_final_markup(BODY, RenderGeometry(dpi=203), stock_2x1, zd620_203, margin_dots=-1)


#============================================
def test_render_does_not_mutate_inputs(stock_2x1, zd620_203) -> None:
	label = engine.LiteralLabel(f"{LL_MARKER}{BODY}")
	engine.render_final_markup(label, RenderGeometry(dpi=203), stock_2x1, zd620_203)
	assert label.markup == f"{LL_MARKER}{BODY}"
