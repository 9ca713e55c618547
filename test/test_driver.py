import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout, redirect_stderr

from kscope.driver import Driver
from kscope.errors import Diagnostics
from kscope.main import main


def make_driver(source, **kwargs):
    diagnostics = Diagnostics(quiet=True)
    out = io.StringIO()
    driver = Driver(source, diagnostics=diagnostics, out=out, **kwargs)
    return driver, out


class DriverTestCase(unittest.TestCase):
    def test_recovery_skips_exactly_one_token(self):
        driver, _ = make_driver('x + ) 5')
        driver.parser.get_next_token()
        self.assertIsNone(driver.handle_top_level_expression())
        self.assertEqual(
            ["unknown token when expecting an expression"],
            driver.diagnostics.messages())
        tok = driver.parser.cur_tok
        self.assertEqual(('NUMBER', 5.0), (tok.type, tok.value))

    def test_session_resumes_after_parse_error(self):
        driver, _ = make_driver('x + )\ndef foo(a) a')
        driver.run()
        self.assertEqual(1, len(driver.diagnostics.errors))
        self.assertIsNotNone(driver.codegen.lookup('foo'))

    def test_bad_definition_recovers(self):
        driver, _ = make_driver('def (x) x\ndef ok(x) x')
        driver.run()
        self.assertEqual(
            "expected function name in prototype",
            driver.diagnostics.messages()[0])
        self.assertIsNotNone(driver.codegen.lookup('ok'))

    def test_bad_extern_recovers(self):
        driver, _ = make_driver('extern 1\nextern sin(x)')
        driver.run()
        self.assertEqual(
            ["expected function name in prototype"],
            driver.diagnostics.messages())
        self.assertIsNotNone(driver.codegen.lookup('sin'))

    def test_codegen_error_does_not_skip(self):
        driver, out = make_driver('bar(1) def foo(a) a', echo=True)
        driver.run()
        self.assertEqual(1, len(driver.diagnostics.errors))
        self.assertIn('Read function definition:', out.getvalue())

    def test_semicolons_ignored(self):
        driver, _ = make_driver(';;def foo(a) a;')
        driver.run()
        self.assertFalse(driver.diagnostics.has_errors)

    def test_echo(self):
        driver, out = make_driver(
            'extern sin(x)\ndef foo(a) sin(a)\nfoo(1)', echo=True)
        driver.run()
        text = out.getvalue()
        self.assertIn('Read extern:', text)
        self.assertIn('Read function definition:', text)
        self.assertIn('Read top-level expression:', text)
        self.assertIn('define double @"foo"', text)

    def test_diagnostics_printed(self):
        stream = io.StringIO()
        driver = Driver('x + )', diagnostics=Diagnostics(stream=stream))
        driver.run()
        self.assertEqual(
            "Error: 1:5: unknown token when expecting an expression\n",
            stream.getvalue())


class MainTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write(self, name, text):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'w') as f:
            f.write(text)
        return path

    def test_emit_to_file(self):
        src = self.write('ok.ks', 'def foo(a b) a+b\n')
        out = os.path.join(self.tmpdir.name, 'ok.ll')
        with redirect_stderr(io.StringIO()):
            self.assertEqual(0, main([src, '--out', out]))
        with open(out) as f:
            self.assertIn('define double @"foo"', f.read())

    def test_print_module(self):
        src = self.write('ok.ks', 'extern cos(x)\n')
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            self.assertEqual(0, main([src]))
        self.assertIn('declare double @"cos"', stdout.getvalue())

    def test_errors_give_exit_code(self):
        src = self.write('bad.ks', 'def foo(a) b\n')
        stderr = io.StringIO()
        with redirect_stderr(stderr), redirect_stdout(io.StringIO()):
            self.assertEqual(1, main([src]))
        self.assertIn("bad.ks: unknown variable name 'b'", stderr.getvalue())

    def test_run_jit(self):
        src = self.write('eval.ks', 'def foo(a b) a+b\nfoo(1, 2)\n')
        stdout = io.StringIO()
        with redirect_stdout(stdout):
            self.assertEqual(0, main([src, '--run-jit']))
        self.assertIn('Evaluated to 3.000000', stdout.getvalue())


if __name__ == '__main__':
    unittest.main()
