import pytest

from simulator.dsl import parse_definition

UNARY_INCREMENT = """\
%charset 0 1 _
%blank _
%memory 111
> 0
1 A
0 1 -> 1 r 0
0 _ -> 1 - 1
"""

EVEN_PARITY = """\
%charset 0 1 _
%blank _
> 0
1
2 A
3 R
0 0 -> 0 r 0
0 1 -> 1 r 1
0 _ -> _ - 2
1 0 -> 0 r 1
1 1 -> 1 r 0
1 _ -> _ - 3
"""


@pytest.fixture
def unary_text():
    return UNARY_INCREMENT


@pytest.fixture
def parity_text():
    return EVEN_PARITY


@pytest.fixture
def unary_definition():
    return parse_definition(UNARY_INCREMENT)


@pytest.fixture
def parity_definition():
    return parse_definition(EVEN_PARITY)
