from pathlib import Path

from roguedex.data import paths


def test_definitions_path_points_at_shipped_data() -> None:
    definitions = paths.get_definitions_path()

    assert definitions == paths.get_repo_root() / "data" / "definitions"
    assert (definitions / "species.json").is_file()


def test_definitions_path_honors_override(tmp_path: Path) -> None:
    assert paths.get_definitions_path(tmp_path) == tmp_path


def test_definition_file_joins_filename(tmp_path: Path) -> None:
    assert paths.get_definition_file("events.json", tmp_path) == tmp_path / "events.json"
    assert paths.get_definition_file("maps.json").parent == paths.get_definitions_path()
