from branch_history.adapters.textual import app


def test_parse_args_defaults_without_environment(monkeypatch) -> None:
    monkeypatch.delenv("BRANCH_HISTORY_VALIDATE_REDO", raising=False)
    monkeypatch.delenv("BRANCH_HISTORY_OBSERVE", raising=False)

    args = app._parse_args([])

    assert args.lax_redo is False
    assert args.observe is False
    assert args.telemetry_preset is None


def test_parse_args_reads_environment_defaults(monkeypatch) -> None:
    monkeypatch.setenv("BRANCH_HISTORY_VALIDATE_REDO", "0")
    monkeypatch.setenv("BRANCH_HISTORY_OBSERVE", "true")

    args = app._parse_args([])

    assert args.lax_redo is True
    assert args.observe is True


def test_create_default_tree_honours_flags() -> None:
    tree = app.create_default_tree(validate_redo=False, observe=True)

    assert tree.validate_redo is False
    assert tree.current.label == "empty document"
