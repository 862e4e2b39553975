from __future__ import annotations

import yaml

from drone_cache_convert.config.settings import load_settings
from drone_cache_convert.gateway import main as cli


def test_parser_defaults_to_serving():
    args = cli.build_parser().parse_args([])
    assert args.command is None
    assert args.debug is None


def test_convert_rewrites_file(tmp_path, monkeypatch):
    monkeypatch.setenv("CACHE_FOO", "bar")
    source = tmp_path / ".drone.yml"
    source.write_text("kind: pipeline\nsteps:\n  - name: build\n    caches: [pip]\n")
    settings = load_settings(image="example/cache", cache_path="/srv/cache")

    document = yaml.safe_load(cli.convert(settings, str(source)))

    restore = document["steps"][0]
    assert restore["image"] == "example/cache"
    assert restore["environment"] == {"PLUGIN_FOO": "bar"}
    assert restore["settings"]["mount"] == ["/root/.cache/pip"]
    assert {"name": "cache", "host": {"path": "/srv/cache"}} in document["volumes"]


def test_main_convert_prints_output(tmp_path, capsys):
    source = tmp_path / "pipeline.yml"
    source.write_text("kind: pipeline\nsteps:\n  - name: build\n    caches: [npm]\n")

    assert cli.main(["--image", "foo", "convert", str(source)]) == 0

    output = capsys.readouterr().out
    assert output.startswith("---\n")
    assert "build-cache-restore" in output


def test_main_reports_parse_errors(tmp_path, capsys):
    source = tmp_path / "broken.yml"
    source.write_text("kind: [\n")

    assert cli.main(["convert", str(source)]) == 1
    assert "not valid YAML" in capsys.readouterr().err


def test_main_serve_requires_secret(capsys):
    assert cli.main(["serve", "--port", "0"]) == 1
    assert "secret" in capsys.readouterr().err.lower()
