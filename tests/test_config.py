import json

from pdflyer.config import EditorConfig, load_config


def test_defaults():
    config = EditorConfig()

    assert config.display_width == 800
    assert config.export_scale == 2.0
    assert config.max_placed_width == 200
    assert config.default_position == (50, 50)
    assert config.signature_pad_size == (600, 240)
    assert config.export_file_name == "edited_document.pdf"
    assert config.signature_storage_key == "pdfSignatures"


def test_from_dict_converts_lists():
    config = EditorConfig.from_dict({"default_position": [10, 20], "export_scale": 3.0})

    assert config.default_position == (10, 20)
    assert config.export_scale == 3.0


def test_from_dict_ignores_unknown_keys(caplog):
    config = EditorConfig.from_dict({"theme": "dark"})

    assert config == EditorConfig()
    assert "theme" in caplog.text


def test_load_config_without_file(tmp_path):
    assert load_config(tmp_path / "missing.json") == EditorConfig()


def test_load_config_reads_overrides(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"history_size": 5}))

    assert load_config(path).history_size == 5


def test_load_config_default_location(tmp_path):
    (tmp_path / "config").mkdir(exist_ok=True)
    (tmp_path / "config" / "settings.json").write_text(json.dumps({"display_width": 640}))

    assert load_config().display_width == 640


def test_load_config_bad_json(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{oops")

    assert load_config(path) == EditorConfig()


def test_load_config_non_object(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]")

    assert load_config(path) == EditorConfig()
