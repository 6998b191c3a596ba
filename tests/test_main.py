"""Tests for the subcommand dispatcher and the validate/prune CLIs."""

import json

import pytest
import yaml


VALID_DOC = (
    "folders:\n"
    "  - name: Assets\n"
    "files:\n"
    "  - id: 1\n"
    "    path: /footage/a.mov\n"
    "    folder: Assets\n"
    "comps:\n"
    "  - name: Main\n"
    "    width: 1280\n"
    "    height: 720\n"
    "    framerate: 24\n"
    "    layers:\n"
    "      - name: Clip\n"
    "        file: 1\n"
    "      - name: Control\n"
    "        type: null\n"
)


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestMainDispatcher:
    def test_no_subcommand_shows_help(self, capsys):
        from compdown.main import main

        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code != 0
        assert "validate" in capsys.readouterr().out

    def test_validate_subcommand_exists(self):
        """Recognized, then fails on the missing document argument."""
        from compdown.main import main

        with pytest.raises(SystemExit):
            main(["validate"])

    def test_prune_subcommand_exists(self):
        from compdown.main import main

        with pytest.raises(SystemExit):
            main(["prune"])

    def test_invalid_subcommand_errors(self):
        from compdown.main import main

        with pytest.raises(SystemExit) as exc_info:
            main(["nonexistent"])
        assert exc_info.value.code != 0

    def test_arguments_forwarded(self, tmp_path, capsys):
        from compdown.main import main

        main(["validate", _write(tmp_path, "scene.yaml", VALID_DOC)])
        assert "Document valid" in capsys.readouterr().out


class TestValidateCli:
    def test_valid_document_summary(self, tmp_path, capsys):
        from compdown.validate_cli import main

        main([_write(tmp_path, "scene.yaml", VALID_DOC)])
        out = capsys.readouterr().out
        assert "Document valid: 1 folders, 1 files, 1 compositions, 2 layers" in out
        assert "0: Main: 1280x720, 24fps, 10s, 2 layers" in out

    def test_invalid_document_lists_errors(self, tmp_path, capsys):
        from compdown.validate_cli import main

        text = "comps:\n  - name: Main\n    layers:\n      - name: Bad\n        type: solid\n"
        with pytest.raises(SystemExit) as exc_info:
            main([_write(tmp_path, "bad.yaml", text)])
        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Document invalid: 1 error(s)" in out
        assert "Line 5: " in out
        assert "color" in out

    def test_unresolved_reference(self, tmp_path, capsys):
        from compdown.validate_cli import main

        text = VALID_DOC.replace("file: 1", "file: 2")
        with pytest.raises(SystemExit) as exc_info:
            main([_write(tmp_path, "scene.yaml", text)])
        assert exc_info.value.code == 1
        assert "cannot be materialized" in capsys.readouterr().out

    def test_timeline_flag(self, tmp_path, capsys):
        from compdown.validate_cli import main

        text = (
            "destination: _timeline\n"
            "folders:\n"
            "  - name: Overlays\n"
            "layers:\n"
            "  - name: Control\n"
            "    type: null\n"
        )
        path = _write(tmp_path, "overlay.yaml", text)
        with pytest.raises(SystemExit):
            main([path])
        assert "active composition timeline" in capsys.readouterr().out

        main([path, "--timeline"])
        assert "1 layers" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        from compdown.validate_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "nope.yaml")])
        assert exc_info.value.code == 2

    def test_undecodable_file(self, tmp_path, capsys):
        from compdown.validate_cli import main

        path = tmp_path / "scene.yaml"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 2
        assert "cannot read document" in capsys.readouterr().err

    def test_directory_path(self, tmp_path, capsys):
        from compdown.validate_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path)])
        assert exc_info.value.code == 2
        assert "cannot read document" in capsys.readouterr().err


class TestPruneCli:
    GENERATED = {
        "files": [],
        "compositions": [{
            "name": "Main",
            "width": 1920,
            "height": 1080,
            "duration": 10,
            "framerate": 30,
            "pixelAspect": 1,
            "layers": [{"name": "Title", "type": "text", "text": "Hi", "label": 1}],
            "markers": [],
        }],
    }

    def test_prints_to_stdout(self, tmp_path, capsys):
        from compdown.prune_cli import main

        main([_write(tmp_path, "generated.json", json.dumps(self.GENERATED))])
        out = capsys.readouterr().out
        assert yaml.safe_load(out) == {"compositions": [{
            "name": "Main",
            "layers": [{"name": "Title", "type": "text", "text": "Hi"}],
        }]}

    def test_writes_output_file(self, tmp_path, capsys):
        from compdown.prune_cli import main

        output = tmp_path / "out" / "scene.yaml"
        main([
            _write(tmp_path, "generated.json", json.dumps(self.GENERATED)),
            "--output", str(output),
        ])
        assert f"Done: {output}" in capsys.readouterr().out
        assert "label" not in output.read_text(encoding="utf-8")

    def test_check_passes(self, tmp_path, capsys):
        from compdown.prune_cli import main

        main([_write(tmp_path, "generated.json", json.dumps(self.GENERATED)), "--check"])
        assert "Title" in capsys.readouterr().out

    def test_check_fails_on_invalid_result(self, tmp_path, capsys):
        from compdown.prune_cli import main

        generated = {"compositions": [{"name": "Main", "layers": [{"name": "Bad", "type": "solid"}]}]}
        with pytest.raises(SystemExit) as exc_info:
            main([_write(tmp_path, "generated.json", json.dumps(generated)), "--check"])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Pruned document invalid" in captured.err

    def test_missing_file(self, tmp_path):
        from compdown.prune_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path / "nope.json")])
        assert exc_info.value.code == 2

    def test_empty_file(self, tmp_path):
        from compdown.prune_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([_write(tmp_path, "empty.yaml", "")])
        assert exc_info.value.code == 2

    def test_malformed_file(self, tmp_path, capsys):
        from compdown.prune_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([_write(tmp_path, "generated.yaml", "a: [1,\n")])
        assert exc_info.value.code == 2
        assert "cannot parse document" in capsys.readouterr().err

    def test_undecodable_file(self, tmp_path, capsys):
        from compdown.prune_cli import main

        path = tmp_path / "generated.json"
        path.write_bytes(b"\xff\xfe")
        with pytest.raises(SystemExit) as exc_info:
            main([str(path)])
        assert exc_info.value.code == 2
        assert "cannot" in capsys.readouterr().err

    def test_directory_path(self, tmp_path, capsys):
        from compdown.prune_cli import main

        with pytest.raises(SystemExit) as exc_info:
            main([str(tmp_path)])
        assert exc_info.value.code == 2
        assert "cannot read document" in capsys.readouterr().err

    def test_alias_cycle(self, tmp_path, capsys):
        from compdown.prune_cli import main

        text = "compositions: &c\n  - name: Main\n    layers: *c\n"
        with pytest.raises(SystemExit) as exc_info:
            main([_write(tmp_path, "generated.yaml", text)])
        assert exc_info.value.code == 2
        assert "reference cycle" in capsys.readouterr().err
