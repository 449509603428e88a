import pytest

from plume.plume_lexer import Lexer
from plume.plume_parser import Parser


@pytest.fixture
def lexer() -> Lexer:
    return Lexer()


@pytest.fixture
def parser() -> Parser:
    return Parser()
