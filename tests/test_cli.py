import yaml

from stakekit.cli import main

DOCUMENT = """
prater:
  execution: [erigon]
  consensus: [lighthouse]
  rocketpool: {node_password: pw}
broken:
  execution: [geth]
  consensus: [lighthouse]
"""


def write_document(tmp_path):
    path = tmp_path / "stakekit.yaml"
    path.write_text(DOCUMENT)
    return path


def test_plan_summary(tmp_path, capsys):
    write_document(tmp_path)
    assert main(["plan", "prater"]) == 0
    out = capsys.readouterr().out
    assert "execution: erigon" in out
    assert "StatefulSet/rocketpool" in out


def test_plan_yaml(tmp_path, capsys):
    write_document(tmp_path)
    assert main(["plan", "prater", "--yaml"]) == 0
    documents = list(yaml.safe_load_all(capsys.readouterr().out))
    assert documents[0]["kind"] == "Namespace"


def test_errors_exit_nonzero(tmp_path, capsys):
    write_document(tmp_path)
    assert main(["plan", "broken"]) == 1
    assert "Unknown execution client 'geth'" in capsys.readouterr().err
    assert main(["-f", str(tmp_path / "missing.yaml"), "plan", "prater"]) == 1


def test_render_to_directory(tmp_path):
    write_document(tmp_path)
    assert main(["render", "prater", "-o", str(tmp_path / "out")]) == 0
    assert (tmp_path / "out" / "kustomization.yaml").exists()
    assert main(["render", "prater", "--dry-run"]) == 0
    assert not (tmp_path / "manifests").exists()


def test_render_uses_configured_output_dir(tmp_path, monkeypatch):
    write_document(tmp_path)
    monkeypatch.setenv("STAKEKIT_OUTPUT_DIR", str(tmp_path / "rendered"))
    assert main(["render", "prater"]) == 0
    assert (tmp_path / "rendered" / "prater" / "kustomization.yaml").exists()


def test_clients_lists_registries(capsys):
    assert main(["clients"]) == 0
    out = capsys.readouterr().out
    assert "erigon" in out and "teku" in out


def test_config_set_get(isolated_home, capsys):
    assert main(["config", "set", "default_network", "prater"]) == 0
    assert (isolated_home / ".config" / "stakekit" / "config.yaml").exists()
    capsys.readouterr()
    assert main(["config", "get", "default_network"]) == 0
    assert capsys.readouterr().out.strip() == "prater"
    assert main(["config", "get", "nope"]) == 1


def test_init_writes_a_composable_document(tmp_path):
    assert main(["init", "prater"]) == 0
    assert main(["init"]) == 1
    assert main(["plan", "prater"]) == 0
