import yaml

from lantern.core.config import Config


def test_default_config_written_on_first_run(tmp_path) -> None:
    path = tmp_path / "conf" / "config.yaml"

    config = Config(config_path=str(path))

    assert path.exists()
    assert config.get_section("location")["city"] == "Jakarta"
    assert config.get_section("api")["port"] == 8765


def test_partial_config_filled_with_defaults(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LANTERN_CITY", "Makassar")
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({"location": {"city": "${LANTERN_CITY}"}, "extra": 1}))

    config = Config(config_path=str(path))

    assert config.get_section("location") == {"city": "Makassar", "country": "Indonesia", "method": 11}
    assert config.get_section("fetch")["timeout"] == 10
    assert config.data["extra"] == 1


def test_reload_notifies_callbacks(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    config = Config(config_path=str(path))
    seen = []
    config.register_change_callback(lambda data: seen.append(data["location"]["city"]))

    path.write_text(yaml.safe_dump({"location": {"city": "Padang"}}))
    config.reload()

    assert seen == ["Padang"]


def test_broken_yaml_keeps_previous_config(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    config = Config(config_path=str(path))

    path.write_text("location: [unclosed")
    config.reload()

    assert config.get_section("location")["city"] == "Jakarta"
