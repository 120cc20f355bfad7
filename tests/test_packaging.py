from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def test_project_metadata_references_packaged_files() -> None:
    pyproject = (PROJECT_ROOT / "pyproject.toml").read_text()
    for line in pyproject.splitlines():
        key, _, value = line.partition("=")
        if key.strip() == "readme":
            readme = value.strip().strip('"')
            assert readme.upper().startswith("README")
            assert (PROJECT_ROOT / readme).is_file()
