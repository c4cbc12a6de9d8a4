import pytest

from i18n_codemod import cli
from i18n_codemod.errors import CodemodConfigurationError
from i18n_codemod.transformer import CodemodSummary

from helpers import make_settings


@pytest.fixture(autouse=True)
def settings(monkeypatch):
    monkeypatch.setattr(cli, "get_settings", lambda: make_settings())


def test_parser_requires_paths():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_main_rewrites_files(tmp_path, write_source, capsys):
    app = write_source(
        "App.jsx",
        """
        const App = () => <p>Hello</p>;
        export default App;
        """,
    )
    exit_code = cli.main([str(tmp_path), "--non-interactive"])
    assert exit_code == 0
    assert app.read_text(encoding="utf-8").startswith(
        "import { useTranslation } from 'react-i18next';\n"
    )
    assert "Codemod complete." in capsys.readouterr().out


def test_main_dry_run_with_double_quotes(tmp_path, write_source, capsys):
    app = write_source("App.jsx", "const App = () => <p>Hello</p>;\n")
    exit_code = cli.main([str(app), "--stdout", "--quote", "double"])
    captured = capsys.readouterr()
    assert exit_code == 0
    assert '<p>{t("hello")}</p>' in captured.out
    assert "Dry run complete." in captured.err
    assert app.read_text(encoding="utf-8") == "const App = () => <p>Hello</p>;\n"


def test_failed_files_set_exit_code(tmp_path, write_source):
    write_source("Broken.jsx", "const A = () => <div>;\n")
    assert cli.main([str(tmp_path), "--non-interactive"]) == 1


def test_missing_path_is_reported(tmp_path, capsys):
    exit_code = cli.main([str(tmp_path / "nope")])
    assert exit_code == 1
    assert "Path not found" in capsys.readouterr().out


def test_configuration_errors_are_reported(monkeypatch, tmp_path, capsys):
    def broken_settings():
        raise CodemodConfigurationError("bad settings")

    monkeypatch.setattr(cli, "get_settings", broken_settings)
    assert cli.main([str(tmp_path)]) == 1
    assert "bad settings" in capsys.readouterr().out


def test_print_summary_lists_notes(capsys):
    summary = CodemodSummary(files_scanned=2, files_changed=1, notes=["App.jsx: note"])
    cli.print_summary(summary)
    out = capsys.readouterr().out
    assert "Files scanned:   2" in out
    assert "- App.jsx: note" in out
