from pathlib import Path

from automator.core.schemas import EnvironmentRecord
from automator.store import env_store


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_load_missing_file_flags_no_env_file(tmp_path):
    record, status = env_store.load(tmp_path / "playwright-automation" / ".env")

    assert record.values == {}
    assert status.needs_setup is True
    assert status.no_env_file is True
    assert status.missing_vars == ("BASE_PAGE", "BASE_API", "API_DOCUMENTATION")


def test_load_unreadable_file_is_treated_as_empty(tmp_path):
    env_path = tmp_path / ".env"
    env_path.write_bytes(b"BASE_PAGE=\xff\xfe\n")

    record, status = env_store.load(env_path)

    assert record.values == {}
    assert status.needs_setup is True
    assert status.no_env_file is False


def test_load_directory_in_place_of_file_does_not_raise(tmp_path):
    env_path = tmp_path / ".env"
    env_path.mkdir()

    record, status = env_store.load(env_path)

    assert record.values == {}
    assert status.needs_setup is True


def test_load_reads_only_recognised_keys(tmp_path):
    env_path = _write(
        tmp_path / ".env",
        "BASE_PAGE=https://a\nSECRET=x\nbase_api=lower\n# comment\nBASE_API=https://b/api\n",
    )

    record, status = env_store.load(env_path)

    assert record.values == {"BASE_PAGE": "https://a", "BASE_API": "https://b/api"}
    assert status.needs_setup is True
    assert status.missing_vars == ("API_DOCUMENTATION",)


def test_compute_status_requires_core_keys():
    status = env_store.compute_status(EnvironmentRecord({"BASE_PAGE": "https://a"}))

    assert status.needs_setup is True
    assert status.missing_vars == ("BASE_API",)


def test_compute_status_requires_documentation_when_api_is_set():
    record = EnvironmentRecord({"BASE_PAGE": "https://a", "BASE_API": "https://b/api"})

    assert env_store.compute_status(record).needs_setup is True

    record.values["API_DOCUMENTATION"] = "https://b/docs"
    status = env_store.compute_status(record)
    assert status.needs_setup is False
    assert status.missing_vars == ()


def test_compute_status_empty_api_does_not_require_documentation():
    record = EnvironmentRecord({"BASE_PAGE": "https://a", "BASE_API": ""})

    status = env_store.compute_status(record)

    assert status.needs_setup is False


def test_save_creates_directory_and_single_trailing_newline(tmp_path):
    env_path = tmp_path / "playwright-automation" / ".env"

    env_store.save(env_path, {"BASE_PAGE": "https://a", "BASE_API": "  ", "API_DOCUMENTATION": None})

    assert env_path.read_text(encoding="utf-8") == "BASE_PAGE=https://a\n"


def test_save_preserves_unrelated_lines_and_overwrites_known_keys(tmp_path):
    env_path = _write(
        tmp_path / ".env",
        "# project settings\nBASE_PAGE=https://old\nTOKEN=abc=def\n\n\nBASE_PAGE=https://dup\n",
    )

    env_store.save(env_path, {"BASE_PAGE": "https://new", "BASE_API": "https://b/api"})

    assert env_path.read_text(encoding="utf-8") == (
        "# project settings\nBASE_PAGE=https://new\nTOKEN=abc=def\nBASE_API=https://b/api\n"
    )


def test_save_drops_line_when_value_blank(tmp_path):
    env_path = _write(tmp_path / ".env", "BASE_PAGE=https://a\nBASE_API=https://b\n")

    env_store.save(env_path, {"BASE_PAGE": "https://a", "BASE_API": ""})

    assert env_path.read_text(encoding="utf-8") == "BASE_PAGE=https://a\n"


def test_save_keeps_lines_for_keys_not_supplied(tmp_path):
    env_path = _write(tmp_path / ".env", "API_DOCUMENTATION=https://b/docs\n")

    env_store.save(env_path, {"BASE_PAGE": "https://a"})

    assert env_path.read_text(encoding="utf-8") == "API_DOCUMENTATION=https://b/docs\nBASE_PAGE=https://a\n"


def test_save_then_load_round_trips_values_and_extra_lines(tmp_path):
    env_path = _write(
        tmp_path / ".env",
        "EXTRA_ONE=1\nBASE_API=https://old/api\nnot an assignment\nBASE_API=https://older/api\n",
    )
    supplied = {
        "BASE_PAGE": "https://a",
        "BASE_API": "https://b/api",
        "API_DOCUMENTATION": "https://b/docs",
    }

    env_store.save(env_path, supplied)
    record, status = env_store.load(env_path)

    assert record.values == supplied
    assert status.needs_setup is False
    lines = env_path.read_text(encoding="utf-8").splitlines()
    assert "EXTRA_ONE=1" in lines
    assert "not an assignment" in lines
    keys = [line.split("=", 1)[0] for line in lines if "=" in line]
    assert len(keys) == len(set(keys))


def test_save_accepts_environment_record(tmp_path):
    env_path = tmp_path / ".env"

    env_store.save(env_path, EnvironmentRecord({"BASE_API": "https://b/api"}))

    assert env_path.read_text(encoding="utf-8") == "BASE_API=https://b/api\n"


def test_load_unusable_path_does_not_raise(tmp_path):
    record, status = env_store.load(tmp_path / ("x" * 300) / ".env")

    assert record.values == {}
    assert status.needs_setup is True
    assert status.no_env_file is False


def test_load_parent_is_a_file_counts_as_missing(tmp_path):
    parent = _write(tmp_path / "playwright-automation", "not a directory\n")

    _, status = env_store.load(parent / ".env")

    assert status.no_env_file is True


def test_save_without_values_keeps_the_duplicate_that_load_reads(tmp_path):
    env_path = _write(tmp_path / ".env", "BASE_PAGE=https://a\nOTHER=1\nBASE_PAGE=https://b\n")
    before, _ = env_store.load(env_path)

    env_store.save(env_path, {})
    after, _ = env_store.load(env_path)

    assert before.get("BASE_PAGE") == after.get("BASE_PAGE") == "https://b"
    assert env_path.read_text(encoding="utf-8") == "OTHER=1\nBASE_PAGE=https://b\n"
