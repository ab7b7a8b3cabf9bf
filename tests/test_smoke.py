import json

from configloader.main import main


def test_show_prints_settings(tmp_path, capsys):
    src = tmp_path / "config.toml"
    src.write_bytes(b"\xff\xfe" + 'ProcessName = "svc"\n'.encode("utf-16-le"))

    assert main(["show", str(src), "--temp-dir", str(tmp_path / "tmp")]) == 0
    assert json.loads(capsys.readouterr().out) == {"processname": "svc"}


def test_normalize_to_file(tmp_path):
    # Include a Latin-1 character behind a UTF-8 BOM to force transcoding
    src = tmp_path / "config.ini"
    src.write_bytes(b"\xef\xbb\xbf" + "[site]\ncity = Montréal\nquartier = Côte-des-Neiges\n".encode("latin-1"))
    out = tmp_path / "out.ini"

    assert main(["normalize", str(src), "-o", str(out)]) == 0

    out_bytes = out.read_bytes()
    assert not out_bytes.startswith(b"\xef\xbb\xbf")
    assert "Montréal" in out_bytes.decode("utf-8")


def test_errors_exit_nonzero(tmp_path, capsys):
    assert main(["show", str(tmp_path / "missing.toml")]) == 1
    assert "error:" in capsys.readouterr().err


def test_show_reports_kept_artifact(tmp_path, capsys):
    src = tmp_path / "config.json"
    src.write_text('{"name": "svc"}', encoding="utf-8")
    staging = tmp_path / "tmp"

    assert main(["show", str(src), "--temp-dir", str(staging), "--keep-temp"]) == 0

    kept = list(staging.glob("config-*.json"))
    assert len(kept) == 1
    assert str(kept[0]) in capsys.readouterr().err
