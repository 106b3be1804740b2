import pytest

from Utils.settings import get_settings


@pytest.fixture
def write_lines(tmp_path):
    def _write(lines, name="input.txt"):
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def read_lines():
    def _read(path):
        with open(path, "r", encoding="utf-8") as fh:
            return [line.rstrip("\n") for line in fh]
    return _read


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    # keep settings independent of the developer's environment and .env
    monkeypatch.chdir(tmp_path)
    for key in ("STEMMER_N_WORKERS", "STEMMER_QUEUE_SIZE", "STEMMER_JOIN_TIMEOUT", "STEMMER_TRANSFORM",
                "STEMMER_PRESERVE_ORDER", "STEMMER_INPUT_PATH", "STEMMER_OUTPUT_PATH", "STEMMER_DLQ_DIR"):
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
