import json

import pytest

from markpatch.config import ROOT_ENV_VAR, get_root, load_jobs, parse_jobs, resolve_artifact
from markpatch.errors import ConfigError
from markpatch.patcher import PatchStatus, apply_patches
from markpatch.presets import MASTRA_STUDIO, get_preset, list_presets


def test_root_prefers_explicit_over_env(tmp_path, monkeypatch):
    monkeypatch.setenv(ROOT_ENV_VAR, str(tmp_path / "env"))
    assert get_root() == (tmp_path / "env").resolve()
    assert get_root(tmp_path / "explicit") == (tmp_path / "explicit").resolve()


def test_root_defaults_to_cwd(tmp_path, monkeypatch):
    monkeypatch.delenv(ROOT_ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    assert get_root() == tmp_path.resolve()


def test_absolute_artifact_ignores_root(tmp_path):
    target = tmp_path / "index.html"
    assert resolve_artifact(str(target), "/elsewhere") == target


def test_load_single_job_yaml_with_payload_file(tmp_path):
    (tmp_path / "snippet.html").write_text("<script>INJECTED</script>")
    cfg = tmp_path / "patch.yml"
    cfg.write_text(
        "artifact: dist/index.html\n"
        "marker: '<!-- patched -->'\n"
        "anchor: '<script>'\n"
        "payload_file: snippet.html\n"
        "hint: Run the build first.\n"
    )
    jobs = load_jobs(cfg, root=tmp_path)
    assert len(jobs) == 1
    job = jobs[0]
    assert job.artifact == tmp_path.resolve() / "dist" / "index.html"
    assert job.descriptor.payload == "<script>INJECTED</script>"
    assert job.hint == "Run the build first."


def test_load_patch_list_from_json(tmp_path):
    cfg = tmp_path / "patches.json"
    cfg.write_text(json.dumps({
        "patches": [
            {"artifact": "a.html", "marker": "<!-- a -->", "anchor": "<script>", "payload": "A"},
            {"artifact": "b.html", "marker": "<!-- b -->", "anchor": "</head>", "payload": "B", "separator": "\n"},
        ]
    }))
    (tmp_path / "a.html").write_text("<script></script>")
    (tmp_path / "b.html").write_text("<head></head>")
    jobs = load_jobs(cfg, root=tmp_path)
    results = apply_patches(jobs)
    assert [r.status for r in results] == [PatchStatus.PATCHED, PatchStatus.PATCHED]
    assert (tmp_path / "a.html").read_text() == "<!-- a -->A<script></script>"
    assert (tmp_path / "b.html").read_text() == "<head><!-- b -->\nB\n</head>"


@pytest.mark.parametrize("data, match", [
    ({"artifact": "a", "marker": "m", "anchor": "x"}, "payload"),
    ({"artifact": "a", "marker": "m", "anchor": "x", "payload": "p", "payload_file": "f"}, "payload"),
    ({"artifact": "a", "marker": "m", "anchor": "x", "payload": "p", "colour": "red"}, "colour"),
    ({"artifact": "a", "marker": "", "anchor": "x", "payload": "p"}, "marker"),
    ({"patches": []}, "no patches"),
    (["not", "a", "mapping"], "mapping"),
])
def test_invalid_config_raises(data, match):
    with pytest.raises(ConfigError, match=match):
        parse_jobs(data)


def test_unreadable_config_raises(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read config"):
        load_jobs(tmp_path / "missing.yml")


def test_malformed_yaml_raises(tmp_path):
    cfg = tmp_path / "bad.yml"
    cfg.write_text("artifact: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_jobs(cfg)


def test_mastra_studio_preset_layout(tmp_path):
    preset = get_preset("Mastra-Studio")
    assert preset is MASTRA_STUDIO
    assert preset in list_presets()
    assert get_preset("unknown") is None

    html = tmp_path / preset.artifact
    html.parent.mkdir(parents=True)
    html.write_text("<html><head><script>boot()</script></head></html>")
    jobs = parse_jobs({
        "artifact": preset.artifact,
        "marker": preset.descriptor.marker,
        "anchor": preset.descriptor.anchor,
        "payload": preset.descriptor.payload,
        "separator": preset.descriptor.separator,
    }, root=tmp_path)
    apply_patches(jobs)
    out = html.read_text()
    assert out.startswith("<html><head><!-- mastra-config-injected -->\n    <script>\n  const config")
    assert out.endswith("</script>\n    <script>boot()</script></head></html>")
    assert "localStorage.setItem('mastra-studio-config'" in out


def test_undecodable_config_raises_config_error(tmp_path):
    cfg = tmp_path / "patch.yml"
    cfg.write_bytes(b"artifact: index.html\nmarker: '\xff'\n")
    with pytest.raises(ConfigError, match="Cannot read config"):
        load_jobs(cfg)


def test_undecodable_payload_file_raises_config_error(tmp_path):
    (tmp_path / "snippet.bin").write_bytes(b"\xff\xfe")
    cfg = tmp_path / "patch.yml"
    cfg.write_text(
        "artifact: index.html\n"
        "marker: '<!-- patched -->'\n"
        "anchor: '<script>'\n"
        "payload_file: snippet.bin\n"
    )
    with pytest.raises(ConfigError, match="Cannot read payload file"):
        load_jobs(cfg, root=tmp_path)


def test_unknown_encoding_in_config_raises_config_error():
    data = {"artifact": "a", "marker": "m", "anchor": "x", "payload": "p", "encoding": "nope"}
    with pytest.raises(ConfigError, match="unknown encoding"):
        parse_jobs(data)
