"""
Command-line demos.
"""

from pathlib import Path

import pytest

from scalar_aad.demo import main, parse_args, shared_subexpression, train_xor
from scalar_aad.mlp import MLPConfig


@pytest.mark.parametrize("strategy", ["auto", "toposort"])
def test_shared_subexpression_values(strategy):
    assert shared_subexpression(5.0, 10.0, strategy, verbose=False) == (35.0, 3.0, 2.0)


def test_shared_difference_equals_gradient():
    c0, ga, _ = shared_subexpression(5.0, 10.0, verbose=False)
    c1, _, _ = shared_subexpression(6.0, 10.0, verbose=False)
    assert c1 - c0 == ga


def test_main_shared(capsys):
    assert main(["shared", "--summary"]) == 0
    out = capsys.readouterr().out
    assert "a: data: 5.000000 | grad: 3.000000" in out
    assert "b: data: 10.000000 | grad: 2.000000" in out
    assert "COMPUTATION GRAPH SUMMARY" in out


def test_main_xor_writes_plot(tmp_path, capsys):
    path = tmp_path / "loss.png"
    assert main(["xor", "--epochs", "5", "--seed", "0", "--plot", str(path)]) == 0
    assert path.exists()
    out = capsys.readouterr().out
    assert "Prediction for input {1, 0}" in out


def test_train_xor_quiet(capsys):
    mlp, history = train_xor(MLPConfig(epochs=4, seed=1, preallocate=True))
    assert len(history) == 4
    assert mlp.num_parameters == 17
    assert capsys.readouterr().out == ""


def test_parse_args_defaults():
    args = parse_args(["xor"])
    assert args.epochs == 1000
    assert args.lr == 1.5
    assert args.plot is None
    with pytest.raises(SystemExit):
        parse_args([])


def test_project_metadata_has_no_readme_pointer_to_requirements():
    pyproject = Path(__file__).parent / "pyproject.toml"
    text = pyproject.read_text()
    assert 'name = "scalar-aad"' in text
    assert "SPEC_FULL" not in text
    assert 'scalar-aad = "scalar_aad.demo:main"' in text
