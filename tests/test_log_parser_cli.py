"""Tests del CLI del log parser.

Escenarios cubiertos:
1. Uso / ayuda
2. stdin → stdout
3. Archivo → stdout (texto y CSV)
4. Archivo → archivo, con otro timeslice
5. Parámetro faltante y argumento desconocido
6. Salida de gráficos

Ejecutar:
    pytest tests/test_log_parser_cli.py -v
"""

import io
from dataclasses import replace

import pytest

from common.config import get_settings
from jobs.log_parser.cli import parse_args, run_main
from jobs.log_parser.config import ArgumentValidationError, ParserConfig
from jobs.log_parser.runner import run_pipeline


@pytest.fixture
def log_file(tmp_path, test_log):
    path = tmp_path / "logParserTest.log"
    path.write_text(test_log, encoding="utf-8")
    return path


def run(argv, settings, stdin_text=""):
    stdout, stderr = io.StringIO(), io.StringIO()
    code = run_main(argv, stdin=io.StringIO(stdin_text), stdout=stdout, stderr=stderr, settings=settings)
    return code, stdout.getvalue(), stderr.getvalue()


def assert_has_tags(text):
    assert "tag " in text
    assert "tag2" in text
    assert "tag3" in text


# =============================================================================
# TEST 1: USAGE
# =============================================================================

class TestUsage:

    @pytest.mark.parametrize("flag", ["--help", "-h"])
    def test_help(self, settings, flag):
        code, out, err = run([flag], settings)

        assert code == 0
        assert "Usage" in out
        assert "--timeslice" in out
        assert err == ""

    def test_help_short_circuits_other_errors(self, settings):
        code, out, _ = run(["--foo", "--help"], settings)

        assert code == 0
        assert "Usage" in out


# =============================================================================
# TEST 2-4: PIPELINE
# =============================================================================

class TestPipeline:

    def test_stdin_to_stdout(self, settings, test_log):
        code, out, _ = run([], settings, stdin_text=test_log)

        assert code == 0
        assert_has_tags(out)
        assert out.count("Performance Statistics") == 3

    def test_file_to_stdout(self, settings, log_file):
        code, out, _ = run([str(log_file)], settings)

        assert code == 0
        assert_has_tags(out)

    def test_csv_format(self, settings, log_file):
        code, out, _ = run(["-f", "csv", str(log_file)], settings)

        assert code == 0
        assert '"tag",' in out
        assert '"tag2",' in out
        assert '"tag3",' in out

    def test_file_to_file(self, settings, log_file, tmp_path):
        target = tmp_path / "statistics.out"

        code, out, _ = run(["-o", str(target), str(log_file)], settings)

        assert code == 0
        assert out == ""
        assert_has_tags(target.read_text(encoding="utf-8"))

    def test_different_timeslice(self, settings, log_file, tmp_path):
        target = tmp_path / "statistics.out"

        code, _, _ = run(["-o", str(target), "--timeslice", "120000", str(log_file)], settings)

        text = target.read_text(encoding="utf-8")
        assert code == 0
        assert_has_tags(text)
        assert text.count("Performance Statistics") == 1

    def test_rollup_flag(self, settings, tmp_path):
        log = tmp_path / "rollup.log"
        log.write_text("start[0] time[10] tag[a.b]\nstart[5] time[30] tag[a.c]\n", encoding="utf-8")

        code, out, _ = run(["-r", "-f", "csv", str(log)], settings)

        assert code == 0
        assert '"a",' in out
        assert '"a.b",' in out

    def test_repeated_runs_are_identical(self, settings, log_file):
        first = run(["-f", "csv", str(log_file)], settings)[1]
        second = run(["-f", "csv", str(log_file)], settings)[1]

        assert first == second

    def test_run_pipeline_reports_counters(self, test_log):
        out = io.StringIO()

        stats = run_pipeline(ParserConfig(), io.StringIO(test_log), out)

        assert stats.records_parsed == 6
        assert stats.malformed == 2
        assert stats.late == 0
        assert stats.windows_emitted == 3


# =============================================================================
# TEST 5: ARGUMENT ERRORS
# =============================================================================

class TestArgumentErrors:

    def test_missing_param(self, settings, log_file):
        code, out, err = run([str(log_file), "-o"], settings)

        assert code == 1
        assert "Missing value for parameter -o" in err
        assert out == ""

    def test_unknown_arg(self, settings, log_file):
        code, out, err = run([str(log_file), "--foo"], settings)

        assert code == 1
        assert "Unknown" in err
        assert "--foo" in err
        assert out == ""

    @pytest.mark.parametrize("value", ["abc", "0", "-5"])
    def test_invalid_timeslice(self, settings, log_file, value):
        code, _, err = run(["--timeslice", value, str(log_file)], settings)

        assert code == 1
        assert "Invalid" in err

    def test_invalid_format(self, settings, log_file):
        code, _, err = run(["-f", "xml", str(log_file)], settings)

        assert code == 1
        assert "Invalid" in err

    def test_invalid_graph_stats(self, settings, log_file):
        code, _, err = run(["--graph-stats", "Median", str(log_file)], settings)

        assert code == 1
        assert "Median" in err

    def test_error_kinds(self, settings):
        with pytest.raises(ArgumentValidationError) as unknown:
            parse_args(["--foo"], settings)
        with pytest.raises(ArgumentValidationError) as missing:
            parse_args(["-g"], settings)

        assert unknown.value.kind == ArgumentValidationError.UNKNOWN
        assert missing.value.kind == ArgumentValidationError.MISSING

    def test_unknown_flag_bundled_with_known_short_flag(self, settings, log_file):
        with pytest.raises(ArgumentValidationError) as bundled:
            parse_args(["-rx"], settings)

        code, out, err = run(["-rx", str(log_file)], settings)

        assert bundled.value.kind == ArgumentValidationError.UNKNOWN
        assert code == 1
        assert "Unknown argument" in err
        assert out == ""

    def test_validation_happens_before_output_is_opened(self, settings, log_file, tmp_path):
        target = tmp_path / "never.out"

        code, _, _ = run(["-o", str(target), "--timeslice", "0", str(log_file)], settings)

        assert code == 1
        assert not target.exists()

    def test_missing_input_file(self, settings, tmp_path):
        target = tmp_path / "never.out"

        code, _, err = run(["-o", str(target), str(tmp_path / "nope.log")], settings)

        assert code == 1
        assert "I/O error" in err
        assert not target.exists()


# =============================================================================
# INPUT ROBUSTNESS
# =============================================================================

# 10000-01-02 00:00:00 UTC, past the last date datetime can represent.
FAR_FUTURE_TS = 253402387200000


class TestInputRobustness:

    def test_far_future_start_is_rendered_as_millis(self, settings):
        code, out, err = run([], settings, stdin_text=f"start[{FAR_FUTURE_TS}] time[10] tag[x]\n")

        assert code == 0
        assert f"Performance Statistics   {FAR_FUTURE_TS} - {FAR_FUTURE_TS + 30000}" in out
        assert err == ""

    def test_far_future_start_in_csv_and_graphs(self, settings, tmp_path):
        log = tmp_path / "future.log"
        log.write_text(f"start[{FAR_FUTURE_TS}] time[10] tag[x]\n", encoding="utf-8")
        graphs_out = tmp_path / "graphs.out"

        code, out, _ = run(["-f", "csv", "-g", str(graphs_out), str(log)], settings)

        assert code == 0
        assert f'"x","{FAR_FUTURE_TS}",' in out
        assert len(graphs_out.read_text(encoding="utf-8").splitlines()) == 2

    def test_undecodable_stdin_bytes_do_not_stop_the_run(self, settings):
        stdin = io.TextIOWrapper(
            io.BytesIO(b"start[0] time[1] tag[\xff]\nstart[5] time[2] tag[ok]\n"),
            encoding="utf-8",
        )
        stdout, stderr = io.StringIO(), io.StringIO()

        code = run_main(["-f", "csv"], stdin=stdin, stdout=stdout, stderr=stderr, settings=settings)

        assert code == 0
        assert '"ok",' in stdout.getvalue()
        assert '"\ufffd",' in stdout.getvalue()

    def test_decode_error_exits_with_message(self, settings):
        class UndecodableStdin:
            def __iter__(self):
                raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        stdout, stderr = io.StringIO(), io.StringIO()

        code = run_main([], stdin=UndecodableStdin(), stdout=stdout, stderr=stderr, settings=settings)

        assert code == 1
        assert "Invalid input encoding" in stderr.getvalue()


# =============================================================================
# TEST 6: GRAPHING
# =============================================================================

class TestGraphing:

    def test_graph_output(self, settings, log_file, tmp_path):
        stats_out = tmp_path / "statistics.out"
        graphs_out = tmp_path / "perfGraphs.out"

        code, _, _ = run(["-o", str(stats_out), "-g", str(graphs_out), str(log_file)], settings)

        graphs = graphs_out.read_text(encoding="utf-8")
        assert code == 0
        assert graphs.index("chtt=Mean") > 0
        assert graphs.index("chtt=TPS") > 0
        assert len(graphs.splitlines()) == 2
        assert_has_tags(stats_out.read_text(encoding="utf-8"))

    def test_graph_stats_selection(self, settings, log_file, tmp_path):
        graphs_out = tmp_path / "graphs.out"

        code, _, _ = run(["-g", str(graphs_out), "--graph-stats", "Max,Count", str(log_file)], settings)

        lines = graphs_out.read_text(encoding="utf-8").splitlines()
        assert code == 0
        assert ["chtt=Max" in lines[0], "chtt=Count" in lines[1]] == [True, True]

    def test_chart_base_url_from_settings(self, settings, log_file, tmp_path):
        graphs_out = tmp_path / "graphs.out"
        custom = replace(settings, chart_base_url="https://charts.example.com/chart?")

        run(["-g", str(graphs_out), str(log_file)], custom)

        assert graphs_out.read_text(encoding="utf-8").startswith("https://charts.example.com/chart?")


# =============================================================================
# SETTINGS
# =============================================================================

SETTINGS_KEYS = ("PERFLOG_TIMESLICE_MS", "PERFLOG_FORMAT", "PERFLOG_ROLLUP", "PERFLOG_GRACE_MS")


@pytest.fixture
def clean_env(monkeypatch):
    """Quita las variables PERFLOG_* y las restaura al terminar (incluidas las de .env)."""
    for key in SETTINGS_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestSettings:

    def test_defaults(self, clean_env, tmp_path):
        clean_env.setenv("PERFLOG_ENV_FILE", str(tmp_path / "missing.env"))

        settings = get_settings()

        assert settings.timeslice_ms == 30000
        assert settings.output_format == "default"
        assert settings.rollup is False
        assert settings.grace_ms == 0

    def test_env_file_and_overrides(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PERFLOG_TIMESLICE_MS=60000\nPERFLOG_ROLLUP=true\nPERFLOG_FORMAT=default\n", encoding="utf-8")
        clean_env.setenv("PERFLOG_ENV_FILE", str(env_file))
        clean_env.setenv("PERFLOG_FORMAT", "csv")

        settings = get_settings()

        assert settings.timeslice_ms == 60000
        assert settings.rollup is True
        assert settings.output_format == "csv"

    def test_settings_drive_cli_defaults(self, settings, log_file):
        csv_settings = replace(settings, output_format="csv")

        code, out, _ = run([str(log_file)], csv_settings)

        assert code == 0
        assert out.startswith('"Tag","Start"')
