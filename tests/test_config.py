import pytest

from java_containers.config import ContainerConfig, format_duration, load_yaml


@pytest.mark.parametrize("seconds,expected", [
    (0.2, "0.2s"),
    (5.6, "5.6s"),
    (184, "3m 4s"),
    (3720, "1h 2m"),
])
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_load_yaml_mapping(tmp_path) -> None:
    path = tmp_path / "karaf.yml"
    path.write_text("features: webconsole,ssh\n")
    assert load_yaml(str(path)) == {"features": "webconsole,ssh"}


def test_load_yaml_empty_file(tmp_path) -> None:
    path = tmp_path / "karaf.yml"
    path.write_text("")
    assert load_yaml(str(path)) == {}


def test_load_yaml_rejects_non_mapping(tmp_path) -> None:
    path = tmp_path / "karaf.yml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_yaml(str(path))


def test_load_yaml_rejects_invalid_yaml(tmp_path) -> None:
    path = tmp_path / "karaf.yml"
    path.write_text("features: [unclosed\n")
    with pytest.raises(ValueError):
        load_yaml(str(path))


def test_load_yaml_missing_file(tmp_path) -> None:
    with pytest.raises(IOError):
        load_yaml(str(tmp_path / "missing.yml"))


def test_container_config_merges_defaults(tmp_path) -> None:
    (tmp_path / "karaf.yml").write_text("version: 3.0.0\n")
    config = ContainerConfig(str(tmp_path))
    result = config.get("karaf", {"version": "2.3.1", "uri": "http://x"})
    assert result == {"version": "3.0.0", "uri": "http://x"}


def test_container_config_without_file_returns_defaults(tmp_path) -> None:
    config = ContainerConfig(str(tmp_path))
    assert config.get("tarball", {"archive": "myapp.tar.gz"}) == {"archive": "myapp.tar.gz"}
    assert ContainerConfig().get("tarball") == {}
