import pytest

from pdflyer.controllers import ERROR, INFO, EditorController
from pdflyer.core.editor import Drawing, EditorSession, Idle, PlacingText, ToolMode
from pdflyer.core.elements import ShapeKind
from pdflyer.core.signatures import SignatureStore
from tests.conftest import ReadOnlyStorage


class Recorder:
    """Collects emitted signal arguments."""

    def __init__(self, signal):
        self.calls = []
        signal.connect(self)

    def __call__(self, *args):
        self.calls.append(args)


@pytest.fixture
def controller(session):
    return EditorController(session)


@pytest.fixture
def loaded_controller(controller, letter_pdf):
    controller.open_bytes(letter_pdf, "application/pdf", "letter.pdf")
    return controller


def test_open_emits_load_signals(controller, letter_pdf):
    loaded = Recorder(controller.document_loaded)
    pages = Recorder(controller.page_changed)

    assert controller.open_bytes(letter_pdf, "application/pdf", "letter.pdf")

    assert loaded.calls == [(3,)]
    assert pages.calls == [(1,)]


def test_open_invalid_type_notifies(controller, letter_pdf):
    notes = Recorder(controller.notification)

    assert not controller.open_bytes(letter_pdf, "text/plain", "letter.txt")

    assert notes.calls == [(ERROR, "Please select a PDF file.")]
    assert controller.session.document is None


def test_open_file_error_keeps_previous_document(loaded_controller, tmp_path):
    bad = tmp_path / "bad.pdf"
    bad.write_bytes(b"garbage")
    previous = loaded_controller.session.document

    assert not loaded_controller.open_file(str(bad))

    assert loaded_controller.session.document is previous


def test_tool_without_document_notifies(controller):
    notes = Recorder(controller.notification)

    controller.select_tool(ToolMode.TEXT)

    assert notes.calls[0][0] == ERROR


def test_toggle_tool(loaded_controller):
    loaded_controller.toggle_tool(ToolMode.TEXT)
    assert loaded_controller.session.tool_mode == ToolMode.TEXT

    loaded_controller.toggle_tool(ToolMode.TEXT)
    assert loaded_controller.session.tool_mode == ToolMode.NONE


def test_text_to_drawing_switch(loaded_controller):
    modes = Recorder(loaded_controller.mode_changed)
    loaded_controller.select_tool(ToolMode.TEXT)
    loaded_controller.place_text(30, 30)

    loaded_controller.select_tool(ToolMode.DRAWING)

    assert isinstance(modes.calls[-1][0], Drawing)
    assert loaded_controller.session.pending_text_position is None


def test_confirm_text_emits_changes(loaded_controller):
    changes = Recorder(loaded_controller.elements_changed)
    loaded_controller.select_tool(ToolMode.TEXT)
    loaded_controller.place_text(30, 30)

    element = loaded_controller.confirm_text("Hi")

    assert element is not None
    assert changes.calls == [()]


def test_text_focus_lost_empty_keeps_tool(loaded_controller):
    loaded_controller.select_tool(ToolMode.TEXT)
    loaded_controller.place_text(30, 30)

    loaded_controller.text_focus_lost("")

    assert loaded_controller.session.mode == PlacingText()


def test_empty_drawing_notifies_and_exits(loaded_controller):
    notes = Recorder(loaded_controller.notification)
    loaded_controller.select_tool(ToolMode.DRAWING)

    loaded_controller.finish_drawing()

    assert notes.calls[-1] == (ERROR, "Nothing has been drawn yet.")
    assert loaded_controller.session.mode == Idle()


def test_finish_drawing_as_signature(loaded_controller):
    signatures = Recorder(loaded_controller.signatures_changed)
    loaded_controller.select_tool(ToolMode.DRAWING)
    loaded_controller.begin_stroke(10, 10)
    loaded_controller.extend_stroke(100, 100)
    loaded_controller.end_stroke()

    loaded_controller.finish_drawing(save_as_signature=True)

    assert signatures.calls == [()]
    assert len(loaded_controller.session.signature_store) == 1


def test_signature_write_failure_notifies(qapp, config, letter_pdf):
    controller = EditorController(EditorSession(SignatureStore(ReadOnlyStorage()), config))
    controller.open_bytes(letter_pdf, "application/pdf", "letter.pdf")
    notes = Recorder(controller.notification)
    signatures = Recorder(controller.signatures_changed)
    controller.select_tool(ToolMode.DRAWING)
    controller.begin_stroke(10, 10)
    controller.extend_stroke(100, 100)
    controller.end_stroke()

    controller.finish_drawing(save_as_signature=True)

    assert notes.calls[-1][0] == ERROR
    assert notes.calls[-1][1].startswith("Signatures could not be saved")
    assert signatures.calls == []
    assert isinstance(controller.session.mode, Drawing)
    controller.session.close_document()


def test_text_style_restyles_selected_text(loaded_controller):
    loaded_controller.select_tool(ToolMode.TEXT)
    loaded_controller.place_text(30, 30)
    element = loaded_controller.confirm_text("hello")
    loaded_controller.select_element(element.id)
    changes = Recorder(loaded_controller.elements_changed)

    restyled = loaded_controller.apply_text_style({"font_size": 24.0})

    assert changes.calls == [()]
    assert restyled.font_size == 24.0
    assert loaded_controller.session.elements.get_element(element.id).font_size == 24.0


def test_text_style_without_selection(loaded_controller):
    changes = Recorder(loaded_controller.elements_changed)

    assert loaded_controller.apply_text_style({"bold": True}) is None

    assert changes.calls == []
    assert loaded_controller.session.text_style.bold


def test_insert_failure_leaves_model_untouched(loaded_controller, tmp_path):
    notes = Recorder(loaded_controller.notification)
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not a png")

    assert loaded_controller.add_image_file(str(bad)) is None

    assert notes.calls[-1][0] == ERROR
    assert loaded_controller.session.elements.get_element_count() == 0


def test_missing_image_file(loaded_controller, tmp_path):
    notes = Recorder(loaded_controller.notification)

    assert loaded_controller.add_image_file(str(tmp_path / "missing.png")) is None
    assert notes.calls[-1][0] == ERROR


def test_add_shape_notifies(loaded_controller):
    notes = Recorder(loaded_controller.notification)

    element = loaded_controller.add_shape(ShapeKind.CIRCLE)

    assert element.shape_kind == ShapeKind.CIRCLE
    assert notes.calls[-1] == (INFO, "Shape added")


def test_apply_missing_signature_is_reported(loaded_controller):
    notes = Recorder(loaded_controller.notification)

    assert loaded_controller.apply_signature(0) is None
    assert notes.calls == [(ERROR, "That signature no longer exists.")]


def test_import_signature_file(loaded_controller, png_bytes, tmp_path):
    path = tmp_path / "sig.png"
    path.write_bytes(png_bytes)

    assert loaded_controller.import_signature_file(str(path), "image/png")
    assert len(loaded_controller.session.signature_store) == 1

    loaded_controller.delete_signature(0)
    assert len(loaded_controller.session.signature_store) == 0


def test_undo_redo(loaded_controller):
    loaded_controller.add_redaction()

    assert loaded_controller.undo()
    assert not loaded_controller.undo()
    assert loaded_controller.redo()


def test_delete_element(loaded_controller):
    element = loaded_controller.add_redaction()
    loaded_controller.select_element(element.id)

    loaded_controller.delete_element(element.id)

    assert loaded_controller.session.selected_id is None


def test_can_export(controller, letter_pdf):
    assert not controller.can_export()

    controller.open_bytes(letter_pdf, "application/pdf", "letter.pdf")
    assert not controller.can_export()

    controller.add_redaction()
    assert controller.can_export()


def test_start_export_without_elements(loaded_controller, tmp_path):
    notes = Recorder(loaded_controller.notification)

    assert not loaded_controller.start_export(str(tmp_path / "out.pdf"))
    assert notes.calls == [(ERROR, "There are no elements to save.")]
