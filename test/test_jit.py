import io
import unittest

from kscope.driver import Driver
from kscope.errors import Diagnostics
from kscope.jit import JIT


def evaluate(source):
    out = io.StringIO()
    diagnostics = Diagnostics(quiet=True)
    driver = Driver(source, jit=JIT(out=out), diagnostics=diagnostics, out=out)
    driver.run()
    return driver, out.getvalue()


class JITTestCase(unittest.TestCase):
    def test_call_defined_function(self):
        driver, output = evaluate('def foo(a b) a+b\nfoo(1,2)')
        self.assertEqual([3.0], driver.results)
        self.assertIn('Evaluated to 3.000000', output)

    def test_precedence(self):
        driver, _ = evaluate('1+2*3\n1*2+3\n10-4-3')
        self.assertEqual([7.0, 5.0, 3.0], driver.results)

    def test_comparison(self):
        driver, _ = evaluate('4 < 5\n5 < 4')
        self.assertEqual([1.0, 0.0], driver.results)

    def test_duplicate_params_later_wins(self):
        driver, _ = evaluate('def f(a a) a\nf(1, 2)')
        self.assertEqual([2.0], driver.results)

    def test_forward_declaration(self):
        source = (
            'extern g(x)\n'
            'def h(x) g(x)*2\n'
            'def g(x) x+1\n'
            'h(3)\n')
        driver, _ = evaluate(source)
        self.assertEqual([8.0], driver.results)
        self.assertFalse(driver.diagnostics.has_errors)

    def test_malformed_literal(self):
        driver, _ = evaluate('1.2.3 + 1')
        self.assertEqual(1, len(driver.results))
        self.assertAlmostEqual(2.2, driver.results[0])

    def test_runtime_library(self):
        driver, output = evaluate('extern printd(x)\nextern putchard(c)\nprintd(42)\nputchard(65)')
        self.assertEqual([0.0, 0.0], driver.results)
        self.assertIn('42.000000\n', output)
        self.assertIn('A', output)

    def test_anonymous_function_erased_after_evaluation(self):
        driver, _ = evaluate('1\n2\n3')
        self.assertEqual([1.0, 2.0, 3.0], driver.results)
        self.assertNotIn('__anon_expr', driver.backend.dump())

    def test_failed_expression_not_evaluated(self):
        driver, _ = evaluate('def foo(a b) a+b\nfoo(1)\nfoo(2, 2)')
        self.assertEqual([4.0], driver.results)
        self.assertIn('incorrect number of arguments', driver.diagnostics.messages()[0])


if __name__ == '__main__':
    unittest.main()
