"""
Tests for gastable.parser
"""

import io

import pytest

from gastable import parser

CROSS_SECTIONS = """\
Cross sections for the parser tests.
Anything outside the blocks is ignored.

ELASTIC
Ar
 1.360000e-5
SPECIES: e / Ar
COMMENT: made up
-----------------------------
 0.000000e+0	7.500000e-20
 1.000000e+0	1.500000e-20
-----------------------------

EXCITATION
Ar -> Ar*(11.5eV)
 1.150000e+1
-----------------------------
 1.150000e+1	0.000000e+0
 2.000000e+1	1.000000e-20
-----------------------------

IONIZATION
Ar -> Ar^+
 1.570000e+1
-----------------------------
 1.570000e+1	0.0
 1.000000e+2	3.0e-20
-----------------------------

EXCITATION
N2 <-> N2(rot)
 0.02 0.5
-----
 0.02 0
 1.0 1e-21
-----

ATTACHMENT
O2 -> O2^-
-----
 0 0
 1 1e-22
-----
"""


@pytest.fixture
def processes():
    return parser.parse(io.StringIO(CROSS_SECTIONS))


def test_kinds(processes):
    assert [p['kind'] for p in processes] == [
        'ELASTIC', 'EXCITATION', 'IONIZATION', 'EXCITATION', 'ATTACHMENT']


def test_elastic(processes):
    elastic = processes[0]
    assert elastic['target'] == 'Ar'
    assert elastic['mass_ratio'] == pytest.approx(1.36e-5)
    assert elastic['data'] == [[0.0, 7.5e-20], [1.0, 1.5e-20]]
    assert 'made up' in elastic['comment']


def test_excitation_and_ionization(processes):
    excitation, ionization = processes[1:3]
    assert excitation['target'] == 'Ar'
    assert excitation['product'] == 'Ar*(11.5eV)'
    assert excitation['threshold'] == pytest.approx(11.5)
    assert 'weight_ratio' not in excitation

    assert ionization['product'] == 'Ar^+'
    assert ionization['threshold'] == pytest.approx(15.7)
    assert ionization['data'][-1] == [100.0, 3e-20]


def test_reversible(processes):
    rotation = processes[3]
    assert rotation['target'] == 'N2'
    assert rotation['product'] == 'N2(rot)'
    assert rotation['threshold'] == pytest.approx(0.02)
    assert rotation['weight_ratio'] == pytest.approx(0.5)


def test_attachment(processes):
    attachment = processes[4]
    assert attachment['target'] == 'O2'
    assert attachment['product'] == 'O2^-'
    assert attachment['threshold'] == 0.0
    assert len(attachment['data']) == 2


def test_no_processes():
    assert parser.parse(io.StringIO("nothing to see here\n")) == []
