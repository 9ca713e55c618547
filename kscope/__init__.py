"""Compiler for a tiny expression language that emits LLVM IR."""

from .driver import Driver, compile_source
from .errors import CompilerError, Diagnostics
from .lexer import Lexer, Token
from .parser import Parser, DEFAULT_BINOP_PRECEDENCE

__version__ = '0.1.0'

__all__ = [
    'CompilerError', 'Diagnostics', 'Driver', 'Lexer', 'Parser', 'Token',
    'DEFAULT_BINOP_PRECEDENCE', 'compile_source',
]
