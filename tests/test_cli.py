"""
Tests for gastable.cli
"""

import os

import pytest

from gastable import cli
from gastable.output import CSV_HEADER


def test_defaults():
    _, args = cli.parse_args([])
    assert args.gas == [['Ar', 100.]]
    assert args.pressure == 750.
    assert args.temperature == 293.15
    assert (args.emin, args.emax, args.ne) == (100., 100000., 100)
    assert args.log is False
    assert args.csv == 'transport_parameters.csv'


def test_config_file(tmp_path):
    config = tmp_path / "argon.yaml"
    config.write_text("pressure: 500\nne: 5\nlog: true\n"
                      "gas:\n  - [Ar, 100]\n")

    _, args = cli.parse_args(['--config', str(config), '--ne', '7'])
    assert args.pressure == 500
    assert args.ne == 7
    assert args.log is True


def test_unknown_config_option(tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("preasure: 500\n")

    with pytest.raises(SystemExit) as exc:
        cli.parse_args(['--config', str(config)])
    assert exc.value.code == 2


@pytest.mark.parametrize("line", [
    "ne: ten",
    "ne: 2.5",
    "pressure: null",
    "emin: [1, 2]",
    "log: maybe",
    "gas: Ar",
    "gas:\n  - [Ar]\n",
    "csv: 5",
])
def test_invalid_config_value(tmp_path, line):
    config = tmp_path / "bad.yaml"
    config.write_text(line + "\n")

    with pytest.raises(SystemExit) as exc:
        cli.parse_args(['--config', str(config)])
    assert exc.value.code == 2


def test_config_gas_mixture(tmp_path):
    config = tmp_path / "mixture.yaml"
    config.write_text("gas:\n  - [Ar, 90]\n  - [O2, '10']\n")

    _, args = cli.parse_args(['--config', str(config)])
    assert args.gas == [['Ar', 90.], ['O2', 10.]]


def test_invalid_setting():
    with pytest.raises(SystemExit) as exc:
        cli.main(['--pressure=-5'])
    assert exc.value.code == 2


def test_unknown_gas():
    with pytest.raises(SystemExit) as exc:
        cli.main(['--gas', 'Xe', '100'])
    assert exc.value.code == 2


def test_run(tmp_path, capsys):
    outdir = str(tmp_path)
    table = str(tmp_path / "argon.npz")

    status = cli.main(['--emin', '10000', '--emax', '20000', '--ne', '2',
                       '--output-dir', outdir, '--save-table', table])
    assert status == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("E_Field: 10000 V/cm")
    assert lines[1].startswith("E_Field: 20000 V/cm")

    for name in ["DriftVelocity.png", "TownsendCoefficient.png",
                 "AttachmentCoefficient.png", "LongitudinalDiffusion.png",
                 "TransverseDiffusion.png"]:
        assert os.path.exists(os.path.join(outdir, name))

    with open(os.path.join(outdir, "transport_parameters.csv"),
              encoding='utf-8') as fp:
        first = fp.read()
    assert first.splitlines()[0] == CSV_HEADER
    assert len(first.splitlines()) == 3

    # Same results from the saved table, without solving again.
    status = cli.main(['--load-table', table, '--no-plots',
                       '--output-dir', outdir, '--csv', 'again.csv'])
    assert status == 0

    with open(os.path.join(outdir, "again.csv"), encoding='utf-8') as fp:
        assert fp.read() == first
